from clubscore.generators.demo_generator import DemoGenerator

__all__ = ["DemoGenerator"]
