from typing import ContextManager
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.traceback import install as install_rich_traceback
from rich.theme import Theme

# Custom theme
notewright_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
})

class ConsoleManager:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConsoleManager, cls).__new__(cls)
            cls._instance.initialized = False
        return cls._instance

    def __init__(self):
        if self.initialized:
            return

        self.console = Console(theme=notewright_theme)
        self.output_mode = "standard"
        self.initialized = True

        install_rich_traceback(console=self.console, show_locals=False)

    def configure(self, output_mode: str = "standard", debug: bool = False):
        """
        output_mode: 'standard', 'verbose', 'silent'
        """
        self.output_mode = output_mode.lower()
        if debug:
            self.output_mode = "verbose"

    def print(self, *args, **kwargs):
        if self.output_mode != "silent":
            self.console.print(*args, **kwargs)

    def success(self, message: str):
        self.print(f"[success]✓ {message}[/success]")

    def error_panel(self, message: str, title: str = "Error"):
        if self.output_mode != "silent":
            self.console.print(Panel(message, title=title, border_style="red", expand=False))

    @contextmanager
    def status(self, message: str) -> ContextManager:
        """
        Show a spinner in standard mode, plain start/finish lines in verbose mode.
        """
        if self.output_mode == "silent":
            yield
            return

        if self.output_mode == "verbose":
            self.console.log(f"Started: {message}")
            try:
                yield
            finally:
                self.console.log(f"Finished: {message}")
            return

        with self.console.status(f"[bold cyan]{message}", spinner="dots"):
            yield

# Global instance
console = ConsoleManager()
