from .gym_env import HyperspaceEnv, render_boards

__all__ = ["HyperspaceEnv", "render_boards"]
