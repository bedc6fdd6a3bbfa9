"""
Core networking components.

    connection.py     One accepted client socket, as a buffered stream
    socket_server.py  Listening socket and accept loop
    thread_pool.py    Fixed-size pool of worker threads
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer
from .thread_pool import Task, ThreadPool, Worker, WorkerState

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
    "ThreadPool",
    "Task",
    "Worker",
    "WorkerState",
]
