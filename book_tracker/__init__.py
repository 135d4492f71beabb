"""Book tracker application package.

Layout mirrors the runtime layers: `config`, `db` (engine, models,
repositories), `services` (use cases + external clients), `routes`
(Flask blueprints) and `startup` (app factory / wiring).
"""

__all__ = [
]
