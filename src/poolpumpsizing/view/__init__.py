"""Charts of pump curves and operating points (matplotlib)."""
