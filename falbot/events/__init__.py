from .command_error_handler import CommandErrorHandler, setup_command_error_handler

__all__ = ["CommandErrorHandler", "setup_command_error_handler"]
