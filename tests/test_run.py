import subprocess
import sys
from unittest.mock import MagicMock, patch
import run

def test_backend_command_binds_configured_address():
    assert run.backend_command("0.0.0.0", 9000) == [
        sys.executable, "-m", "uvicorn", "tradebot.backend:app", "--host", "0.0.0.0", "--port", "9000",
    ]

def test_backend_failure_is_logged_not_raised():
    error = subprocess.CalledProcessError(1, ["uvicorn"])
    with patch("run.subprocess.run", side_effect=error) as run_process:
        run.run_backend()
    assert run_process.call_args[0][0] == run.backend_command()
    assert run_process.call_args.kwargs == {"check": True}

def test_backend_only_without_discord_token():
    with patch("run.DISCORD_BOT_TOKEN", None), \
            patch("run.signal.signal"), \
            patch("run.Thread") as thread, \
            patch("run.run_discord_bot") as discord_bot:
        run.main()

    thread.assert_called_once_with(target=run.run_backend, daemon=True)
    thread.return_value.join.assert_called_once_with()
    discord_bot.assert_not_called()

def test_cleanup_terminates_children():
    child = MagicMock()
    with patch("run.psutil.Process") as process:
        process.return_value.children.return_value = [child]
        run.cleanup()
    child.terminate.assert_called_once_with()
