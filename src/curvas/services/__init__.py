"""Service layer: each function is one unit of work over an AsyncSession."""
