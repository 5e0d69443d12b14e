"""
Backend adapters.

Each adapter translates a Problem into its engine's native model, runs the
engine, and returns a Result (or None when there is no solution). Adapters
are imported on demand by ``ilpkit.SolverFactory`` so that a missing engine
only matters when it is requested.
"""
