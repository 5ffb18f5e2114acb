# bookstore/deps.py
from fastapi import Request


def get_bookstore(request: Request):
    """The ``Bookstore`` the app was created with."""
    return request.app.state.bookstore


def get_assistant(request: Request):
    return request.app.state.assistant
