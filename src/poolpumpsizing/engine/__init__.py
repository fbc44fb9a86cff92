"""
The ENGINE layer holds the pure calculations: curve interpolation, flow
requirements, pump matching, system health and the TDH estimate.
It reads ProjectState snapshots and never touches files or the GUI.
"""
