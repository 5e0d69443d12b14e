"""
ilpkit - solver-agnostic MILP modelling

Run basic functionality test.
"""

from ilpkit import Linear, Problem, SolverFactory, get_available_solvers


def main():
    """Run basic functionality test."""
    print("ilpkit - solver-agnostic MILP (default HiGHS backend)")
    print("=" * 50)

    available = get_available_solvers()
    print(f"\nAvailable solvers: {available}")

    if not available:
        print("\nNo solver available!")
        print("Please install one of:")
        print("  - HiGHS: pip install highspy")
        print("  - Gurobi: pip install ilpkit[gurobi]")
        print("  - Pyomo solvers: glpk, cbc, scip or cplex on PATH")
        return 1

    print("\n--- Test: integer production plan ---")

    problem = Problem()
    problem.set_objective(Linear([143, 60], ["x", "y"]), "max")
    problem.add(Linear([120, 210], ["x", "y"]), "<=", 15000)
    problem.add(Linear([110, 30], ["x", "y"]), "<=", 4000)
    problem.add(Linear([1, 1], ["x", "y"]), "<=", 75)
    problem.set_var_bounds_and_type(0, "x", None, int)
    problem.set_var_bounds_and_type(0, "y", None, int)
    print(problem)

    factory = SolverFactory()
    print(f"Created factory: {factory}")

    result = factory.get().solve(problem)
    print(f"Result: {result}")

    is_valid = result is not None and round(result.objective) == 6266
    print(f"Valid: {is_valid}")

    print("\n" + "=" * 50)
    print("All tests passed!" if is_valid else "Unexpected result!")
    return 0 if is_valid else 1


if __name__ == "__main__":
    exit(main())
