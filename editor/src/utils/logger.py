"""User-facing refusals and the shared exception reporting helper"""
import sys
import logging
import traceback
from PyQt5.QtWidgets import QMessageBox

# Running from source re-raises straight away; frozen builds report first
DEBUG_MODE = not getattr(sys, 'frozen', False)

_logger = logging.getLogger('Notify')
_main_window = None

def set_main_window(window):
    """Register the parent for popups; None keeps everything in the log"""
    global _main_window
    _main_window = window

def notify_user(message: str, title: str = "Mesmerise"):
    """Tell the user a command was refused

    Shows a warning popup when a window is registered, otherwise
    the message goes to the log only.
    """
    _logger.warning(message)
    if _main_window is not None:
        QMessageBox.warning(_main_window, title, message)

def loggerRaise(e: Exception, user_message: str = None, title: str = "Error"):
    """Report an exception, then re-raise it

    Must be called from inside the except block that caught e.

    Args:
        e: Exception being handled
        user_message: Text for the popup instead of str(e)
        title: Popup title

    From source the exception is re-raised untouched. A frozen build
    first logs the traceback and shows a critical popup (or logs the
    message when no window is registered).
    """
    if DEBUG_MODE:
        raise e

    _logger.error("Unhandled error:\n%s", traceback.format_exc())

    text = user_message or str(e)
    if _main_window is None:
        _logger.error("%s - %s", title, text)
    else:
        QMessageBox.critical(_main_window, title, text)

    raise e
