import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Dict, Optional

from rich.logging import RichHandler

from utils.helpers import screenshot_filename


class RunLogger:
    """
    Handles all logging operations for one onboarding run:
    - Severity-tagged run log (console + run_log.txt)
    - Decision log (which archetype fired on each step), JSON Lines
    - Error log with context
    - Screenshot directory and final run summary
    """

    def __init__(self, output_dir: Path, name: str = "onboarding"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        # Create timestamped session directory
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.session_dir = self.output_dir / f"session_{timestamp}"
        self.session_dir.mkdir(exist_ok=True)
        self.screenshots_dir = self.session_dir / "screenshots"
        self.screenshots_dir.mkdir(exist_ok=True)

        # Initialize log files
        self.main_log_file = self.session_dir / "run_log.txt"
        self.action_log_file = self.session_dir / "decisions.jsonl"  # JSON Lines format
        self.error_log_file = self.session_dir / "errors_log.txt"

        self.action_counter = 0

        self._setup_python_logging(name)

        self.info("=" * 60)
        self.info(f"RUN SESSION STARTED: {timestamp}")
        self.info("=" * 60)

    def _setup_python_logging(self, name: str):
        """Configure a dedicated logger writing to the console and the session files"""
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

        file_handler = logging.FileHandler(self.main_log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))

        error_handler = logging.FileHandler(self.error_log_file, encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))

        console_handler = RichHandler(show_path=False, markup=False)
        console_handler.setLevel(logging.INFO)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(error_handler)
        self.logger.addHandler(console_handler)

    def info(self, message: str):
        self.logger.info(message)

    def warn(self, message: str):
        self.logger.warning(message)

    def error(self, message: str, exc_info: bool = False):
        self.logger.error(message, exc_info=exc_info)

    def debug(self, message: str):
        self.logger.debug(message)

    def log_action(self, action_type: str, details: Dict):
        """Log structured decision data in JSON Lines format"""
        self.action_counter += 1
        action_entry = {
            "action_id": self.action_counter,
            "timestamp": datetime.now().isoformat(),
            "action_type": action_type,
            "details": details
        }

        with open(self.action_log_file, 'a', encoding='utf-8') as f:
            f.write(json.dumps(action_entry, ensure_ascii=False, default=str) + '\n')

        self.debug(f"ACTION #{self.action_counter}: {action_type} - {json.dumps(details, ensure_ascii=False, default=str)}")

    def log_error(self, error_type: str, error_message: str, context: Optional[Dict] = None, exc_info: bool = False):
        """Log error with context"""
        message = f"{error_type}: {error_message}"
        if context:
            message += f" | context={json.dumps(context, ensure_ascii=False, default=str)}"
        self.error(message, exc_info=exc_info)

    def screenshot_path(self, counter: int, label: str) -> Path:
        return self.screenshots_dir / screenshot_filename(counter, label)

    def save_final_summary(self, summary: Dict):
        """Save final run summary"""
        summary_file = self.session_dir / "run_summary.json"
        with open(summary_file, 'w', encoding='utf-8') as f:
            json.dump({
                "session_ended": datetime.now().isoformat(),
                "total_actions": self.action_counter,
                **summary
            }, f, indent=2, ensure_ascii=False, default=str)

        self.info("=" * 60)
        self.info("SESSION COMPLETED")
        self.info(f"Total decisions logged: {self.action_counter}")
        self.info("=" * 60)

    def close(self):
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
