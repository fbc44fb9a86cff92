"""
The MODEL layer contains pure data structures: pump curves, the project
configuration snapshot and its persistence.
It has NO knowledge of the engine or the charts.
"""
