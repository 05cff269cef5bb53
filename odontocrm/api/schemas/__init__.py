from .schemas import *  # noqa: F401,F403
