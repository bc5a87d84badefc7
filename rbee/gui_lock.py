"""Global lock serializing everything that drives the mouse and keyboard.

There is one cursor and one keyboard, so two commands interleaving their
moves or keystrokes would produce motion no single person could make.
CommandDispatcher holds this lock for the whole execution of a command;
overlapping commands wait their turn.

Usage:
    from rbee.gui_lock import gui_lock

    with gui_lock:
        executor.run_trajectory(waypoints)
"""

import threading

gui_lock = threading.Lock()
