"""BlockChess — chess game core with a minimax AI and online play."""

__version__ = "0.1.0"
