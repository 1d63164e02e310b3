"""8x8 checkers engine with forced captures and flying kings."""
