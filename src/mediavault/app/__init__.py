from .core.env import Env, env_flags, get_env, pick

__all__ = ["Env", "env_flags", "get_env", "pick"]
