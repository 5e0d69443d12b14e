"""
Basic usage examples for ilpkit.

This script demonstrates the core functionality:
1. Building a problem once and solving it with every available backend
2. Reading primal and dual values
3. Solving 0-1 problems on CP-SAT
4. Customizing the native model with hooks
"""

import logging

from ilpkit import (
    Linear,
    Parameter,
    Problem,
    SolverFactory,
    SolverUnavailableError,
    get_available_solvers,
)


def build_production_problem():
    problem = Problem()
    problem.set_objective(Linear([143, 60], ["x", "y"]), "max")
    problem.add(Linear([120, 210], ["x", "y"]), "<=", 15000)
    problem.add(Linear([110, 30], ["x", "y"]), "<=", 4000)
    problem.add(Linear([1, 1], ["x", "y"]), "<=", 75)
    problem.set_var_type("x", int)
    problem.set_var_type("y", int)
    return problem


def example_solver_switching():
    """
    Example: Switching between solvers.

    The problem is built once; only the factory name changes.
    """
    print("=" * 60)
    print("Example: Solver Switching")
    print("=" * 60)

    problem = build_production_problem()
    print(problem)

    for name in get_available_solvers():
        if name == "cpsat":
            continue  # 0-1 problems only
        print(f"--- Using {name.upper()} ---")
        factory = SolverFactory(name)
        factory.set_parameter(Parameter.TIMEOUT, 100)
        factory.set_parameter(Parameter.VERBOSE, 0)
        try:
            result = factory.get().solve(problem)
        except SolverUnavailableError as exc:
            print(f"Skipped: {exc}")
            continue
        print(f"Result: {result}")


def example_duals():
    """Example: Dual values of a pure LP."""
    print("\n" + "=" * 60)
    print("Example: LP Duals")
    print("=" * 60)

    problem = Problem()
    problem.set_objective(Linear([1, 1], ["x", "y"]), "min")
    problem.add("r1", Linear([1, 2], ["x", "y"]), ">=", 4)
    problem.add("r2", Linear([3, 1], ["x", "y"]), ">=", 6)
    problem.set_var_lower_bound("x", 0)
    problem.set_var_lower_bound("y", 0)

    result = SolverFactory().get().solve(problem)
    print(f"Objective: {result.objective}")
    for row in ("r1", "r2"):
        print(f"Dual of {row}: {result.get_dual_value(row)}")


def example_knapsack_cpsat():
    """Example: 0-1 knapsack on the CP-SAT backend."""
    print("\n" + "=" * 60)
    print("Example: 0-1 Knapsack (CP-SAT)")
    print("=" * 60)

    if "cpsat" not in get_available_solvers():
        print("CP-SAT not available. Install with: pip install ortools")
        return

    items = ["a", "b", "c", "d"]
    problem = Problem()
    problem.set_objective(Linear([5, 4, 3, 7], items), "max")
    problem.add("capacity", Linear([2, 5, 3, 4], items), "<=", 9)
    for item in items:
        problem.set_var_type(item, bool)

    solver = SolverFactory("cpsat").get()
    result = solver.solve(problem)
    print(f"Chosen items: {[item for item in items if result.get_boolean(item)]}")
    print(f"Value: {result.objective}")
    print(f"Improving solutions: {solver.last_history}")


def example_hooks():
    """Example: Tighten a bound on the native HiGHS model."""
    print("\n" + "=" * 60)
    print("Example: Hooks")
    print("=" * 60)

    if "highs" not in get_available_solvers():
        print("HiGHS not available. Install with: pip install highspy")
        return

    def cap_x(highs, var_index):
        j = var_index["x"]
        highs.changeColBounds(j, 0, 10)

    solver = SolverFactory("highs").get()
    solver.add_hook(cap_x)
    result = solver.solve(build_production_problem())
    print(f"With x <= 10: {result}")


def main():
    """Run all examples."""
    logging.basicConfig(level=logging.INFO)
    print("ilpkit Examples")
    print("=" * 60)
    print(f"Available solvers: {get_available_solvers()}")

    if not get_available_solvers():
        print("\nNo solver available!")
        print("Install one of: highspy, scipy, ortools, or a Pyomo solver")
        return

    example_solver_switching()
    example_duals()
    example_knapsack_cpsat()
    example_hooks()

    print("\n" + "=" * 60)
    print("All examples completed!")


if __name__ == "__main__":
    main()
