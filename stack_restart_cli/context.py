import sys
import logging
from pathlib import Path
from typing import Optional
from .config import Config, DEFAULT_ENV_FILE
from .display import Display
from .schemas import RestartSettings
from .stack_manager import StackManager

log = logging.getLogger(__name__)

class AppContext:
    """A central container for the application's runtime state."""

    def __init__(self, verbose: bool = False, env_file: Optional[Path] = None):
        try:
            self.display = Display(verbose=verbose)
            self.config = Config(env_file or DEFAULT_ENV_FILE)
        except Exception as e:
            log.error(f"Failed to initialize application: {e}", exc_info=True)
            sys.exit(1)

    @property
    def verbose(self) -> bool:
        return self.display.verbose

    def stack_manager(self, settings: RestartSettings) -> StackManager:
        """Builds the pipeline for one resolved set of settings."""
        return StackManager(settings, self.display)
