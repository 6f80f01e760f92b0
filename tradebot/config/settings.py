import os
from dotenv import load_dotenv

load_dotenv()

# Backend server
BACKEND_HOST = os.getenv("BACKEND_HOST", "127.0.0.1")
BACKEND_PORT = int(os.getenv("BACKEND_PORT", "8000"))
BACKEND_STARTUP_WAIT = float(os.getenv("BACKEND_STARTUP_WAIT", "5"))

# Discord
DISCORD_BOT_TOKEN = os.getenv("DISCORD_BOT_TOKEN")
BACKEND_URL = os.getenv("BACKEND_URL", f"http://localhost:{BACKEND_PORT}/chat")
BACKEND_TIMEOUT = float(os.getenv("BACKEND_TIMEOUT", "120"))
SESSIONS_PATH = os.getenv("SESSIONS_PATH", "trading-agent-sessions.json")

# API Keys
TOGETHER_API_KEY = os.getenv("TOGETHER_API_KEY")
COINGECKO_API_KEY = os.getenv("COINGECKO_API_KEY")
ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN")

# API URLs
COINGECKO_API_URL = os.getenv("COINGECKO_API_URL", "https://api.coingecko.com/api/v3")
LLM_API_BASE_URL = os.getenv("LLM_API_BASE_URL")

# LLM Settings
LLM_MODEL = os.getenv("LLM_MODEL", "meta-llama/Llama-3.3-70B-Instruct-Turbo-Free")
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "300"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))

# Blockchain
RPC_URL = os.getenv("RPC_URL", "https://data-seed-prebsc-1-s1.binance.org:8545")
CONTRACT_ADDRESS = os.getenv("CONTRACT_ADDRESS")
PRIVATE_KEY = os.getenv("PRIVATE_KEY")
CONTRACT_ABI_PATH = os.getenv(
    "CONTRACT_ABI_PATH",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "contracts", "AITradingPlatform.json"),
)
TRADE_GAS_LIMIT = int(os.getenv("TRADE_GAS_LIMIT", "500000"))
TX_RECEIPT_TIMEOUT = int(os.getenv("TX_RECEIPT_TIMEOUT", "120"))
