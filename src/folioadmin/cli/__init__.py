"""Command line tasks for folioadmin operators."""

from invoke import Collection, Program

from .. import __version__
from . import tasks

program = Program(namespace=Collection.from_module(tasks), version=__version__, name="folioadmin")

__all__ = ["program"]
