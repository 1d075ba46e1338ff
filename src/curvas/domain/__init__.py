"""Pure curva logic: slot pool generation and settlement classification."""
