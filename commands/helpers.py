"""Shared helpers for CLI commands."""

import functools
import logging

import click

from core.controller import SunflowerController
from core.errors import SunflowerError

logger = logging.getLogger(__name__)


def get_controller() -> SunflowerController:
    """Get the controller for this invocation, creating it on first use.

    The root group stores the config path in ctx.obj; tests can put a
    ready-made controller there instead.
    """
    ctx = click.get_current_context()
    obj = ctx.ensure_object(dict)
    if obj.get('controller') is None:
        obj['controller'] = SunflowerController(obj.get('config_path'))
    return obj['controller']


def report_errors(func):
    """Print SunflowerErrors in red and exit with status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SunflowerError as e:
            logger.debug("%s: %s", type(e).__name__, e.technical_message)
            click.secho(f"✗ {e.get_full_message()}", fg='red')
            click.get_current_context().exit(1)
    return wrapper
