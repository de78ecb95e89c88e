"""Domain logic and helpers shared by the blueprints."""
