import subprocess
import sys
import time
import signal
import logging
from threading import Thread
from typing import List
import psutil
from tradebot.config.settings import BACKEND_HOST, BACKEND_PORT, BACKEND_STARTUP_WAIT, DISCORD_BOT_TOKEN

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def backend_command(host: str = BACKEND_HOST, port: int = BACKEND_PORT) -> List[str]:
    return [sys.executable, "-m", "uvicorn", "tradebot.backend:app", "--host", host, "--port", str(port)]

def run_backend():
    """Serve the chat backend with uvicorn until it exits"""
    command = backend_command()
    logger.info(f"Starting trading agent backend on {BACKEND_HOST}:{BACKEND_PORT}")
    try:
        subprocess.run(command, check=True)
    except subprocess.CalledProcessError as e:
        logger.error(f"Backend exited with status {e.returncode}")

def run_discord_bot():
    # imported here so a backend-only run never builds the Discord client
    from tradebot.discord_bot import bot

    logger.info("Starting Discord bot...")
    bot.run(DISCORD_BOT_TOKEN)

def cleanup():
    """Terminate the uvicorn child process"""
    for child in psutil.Process().children(recursive=True):
        try:
            child.terminate()
        except psutil.NoSuchProcess:
            pass

def main():
    signal.signal(signal.SIGINT, lambda s, f: cleanup())
    signal.signal(signal.SIGTERM, lambda s, f: cleanup())

    backend = Thread(target=run_backend, daemon=True)
    backend.start()

    if not DISCORD_BOT_TOKEN:
        logger.warning("DISCORD_BOT_TOKEN not configured, running the backend only")
        backend.join()
        return

    time.sleep(BACKEND_STARTUP_WAIT)
    try:
        run_discord_bot()
    finally:
        cleanup()

if __name__ == "__main__":
    main()
