"""Course catalog: courses and their ordered lessons."""
