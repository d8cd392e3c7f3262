"""
DiskPart Shell - Tokenizer, dispatcher and interpreter loop.
"""

from diskpart.shell.arguments import Arguments
from diskpart.shell.dispatcher import Dispatcher
from diskpart.shell.interpreter import Interpreter, LoopState
from diskpart.shell.resolver import DeviceResolver
from diskpart.shell.tokenizer import tokenize
from diskpart.shell.verbs import Verb

__all__ = [
    "Arguments",
    "Dispatcher",
    "Interpreter",
    "LoopState",
    "DeviceResolver",
    "tokenize",
    "Verb",
]
