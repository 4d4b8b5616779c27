"""
Command Line Interface for the ring SOM TSP solver with observability
"""

import argparse
import json
import os
import sys
import time
import structlog

from somtsp import (
    RingSOM,
    RingSOMConfig,
    NeighborhoodKind,
    load_cities,
    run_sweep,
    summarize_sweep,
    setup_logging,
    trace_operation,
    log_training_metrics,
    log_tour_metrics,
)

# Initialize observability
setup_logging(
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    json_format=False,  # Use console format for CLI
)

logger = structlog.get_logger()

VERSION = "0.1.0"


def save_model(som: RingSOM, output_path: str) -> None:
    """Save trained ring SOM model"""
    try:
        som.save(output_path)
        print(f"Model saved to: {output_path}")
    except Exception as e:
        print(f"Error saving model: {e}", file=sys.stderr)
        sys.exit(1)


def _parse_list(value: str, cast):
    return [cast(item) for item in value.split(",") if item.strip()]


def solve_command(args) -> None:
    """Train a ring on a city file and print the tour"""
    print(f"Loading cities from: {args.input}")
    try:
        cities = load_cities(args.input, args.format)
        print(f"Cities: {len(cities)}")

        n_neurons = args.neurons or 2 * len(cities)
        config = RingSOMConfig(
            n_neurons=n_neurons,
            n_iterations=args.iterations,
            neighborhood=NeighborhoodKind(args.neighborhood),
            initial_alpha=args.alpha,
            alpha_decay=args.eta,
            initial_sigma=args.sigma,
            sigma_decay=args.beta,
            seed=args.seed,
        )

        print(
            f"Training ring SOM: {n_neurons} neurons, {args.iterations} iterations, "
            f"{args.neighborhood} neighborhood"
        )

        with trace_operation(
            "solve", cities=len(cities), neighborhood=args.neighborhood
        ):
            start_time = time.time()
            som = RingSOM(config, verbose=args.verbose)
            result = som.solve(cities)
            log_training_metrics(
                args.neighborhood, time.time() - start_time, args.iterations
            )
            log_tour_metrics(args.neighborhood, result.length)

        print("Training completed!")
        print(f"Tour: {' -> '.join(result.names)}")
        print(f"Tour length: {result.length:.4f}")

        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                json.dump(result.to_dict(), f, indent=2)
            print(f"Tour saved to: {args.output}")

        if args.model:
            save_model(som, args.model)

        if args.plot:
            som.plot_tour(show_plot=False, save_path=args.plot)
            print(f"Tour plot saved to: {args.plot}")

    except Exception as e:
        print(f"Error solving tour: {e}", file=sys.stderr)
        sys.exit(1)


def sweep_command(args) -> None:
    """Sweep hyperparameters and print a summary table"""
    print(f"Loading cities from: {args.input}")
    try:
        cities = load_cities(args.input, args.format)
        print(f"Cities: {len(cities)}")

        grid = {
            "n_neurons": _parse_list(args.neurons, int),
            "neighborhood": _parse_list(args.neighborhoods, str),
            "initial_sigma": _parse_list(args.sigmas, float),
            "initial_alpha": _parse_list(args.alphas, float),
        }
        base_config = RingSOMConfig(
            n_iterations=args.iterations,
            alpha_decay=args.eta,
            sigma_decay=args.beta,
        )

        with trace_operation("sweep", cities=len(cities), repeats=args.repeats):
            frame = run_sweep(
                cities,
                grid,
                repeats=args.repeats,
                base_config=base_config,
                seed=args.seed,
            )
        summary = summarize_sweep(frame)

        print(summary.to_string(index=False))

        if args.output:
            frame.to_csv(args.output, index=False)
            print(f"Sweep results saved to: {args.output}")

    except Exception as e:
        print(f"Error running sweep: {e}", file=sys.stderr)
        sys.exit(1)


def info_command(args) -> None:
    """Show information about a saved ring SOM"""
    print(f"Loading model from: {args.model}")
    try:
        som = RingSOM.load(args.model)

        info = som.get_info()

        print("\n=== Ring SOM Model Information ===")
        print(f"Neurons: {info['n_neurons']}")
        print(f"Neighborhood: {info['neighborhood']}")
        print(f"Cities: {info['n_cities']}")
        print(f"Total Iterations: {info['total_iterations']}")
        if "tour_length" in info:
            print(f"Tour Length: {info['tour_length']:.4f}")

        print("\n=== Configuration ===")
        for key, value in info["config"].items():
            print(f"{key}: {value}")

    except Exception as e:
        print(f"Error loading model: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Ring Self-Organizing Map TSP solver CLI",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    neighborhoods = [kind.value for kind in NeighborhoodKind]

    # Solve command
    solve_parser = subparsers.add_parser("solve", help="Solve a TSP instance")
    solve_parser.add_argument("input", help="City file (CSV or JSON)")
    solve_parser.add_argument("--output", "-o", help="Write the tour as JSON")
    solve_parser.add_argument("--model", help="Save the trained model (pickle)")
    solve_parser.add_argument("--plot", help="Save a tour plot (PNG)")
    solve_parser.add_argument(
        "--neurons", type=int, help="Ring size (twice the city count if not set)"
    )
    solve_parser.add_argument(
        "--iterations", type=int, default=100, help="Number of passes over cities"
    )
    solve_parser.add_argument(
        "--neighborhood",
        choices=neighborhoods,
        default=NeighborhoodKind.ELASTIC.value,
        help="Neighborhood function",
    )
    solve_parser.add_argument(
        "--alpha", type=float, default=0.8, help="Initial learning rate"
    )
    solve_parser.add_argument(
        "--eta", type=float, default=0.99, help="Learning rate decay per pass"
    )
    solve_parser.add_argument(
        "--sigma", type=float, default=10.0, help="Initial neighborhood radius"
    )
    solve_parser.add_argument(
        "--beta", type=float, default=0.97, help="Neighborhood radius decay per pass"
    )
    solve_parser.add_argument(
        "--format", choices=["auto", "csv", "json"], default="auto",
        help="Input file format",
    )
    solve_parser.add_argument(
        "--seed", type=int, help="Random seed for reproducibility"
    )
    solve_parser.add_argument("--verbose", action="store_true", help="Verbose output")

    # Sweep command
    sweep_parser = subparsers.add_parser("sweep", help="Sweep hyperparameters")
    sweep_parser.add_argument("input", help="City file (CSV or JSON)")
    sweep_parser.add_argument("--output", "-o", help="Write all runs as CSV")
    sweep_parser.add_argument(
        "--neurons", default="50,100", help="Comma-separated ring sizes"
    )
    sweep_parser.add_argument(
        "--neighborhoods",
        default=",".join(neighborhoods),
        help="Comma-separated neighborhood functions",
    )
    sweep_parser.add_argument(
        "--sigmas", default="10.0", help="Comma-separated initial radii"
    )
    sweep_parser.add_argument(
        "--alphas", default="0.8", help="Comma-separated initial learning rates"
    )
    sweep_parser.add_argument(
        "--iterations", type=int, default=100, help="Number of passes over cities"
    )
    sweep_parser.add_argument(
        "--eta", type=float, default=0.99, help="Learning rate decay per pass"
    )
    sweep_parser.add_argument(
        "--beta", type=float, default=0.97, help="Neighborhood radius decay per pass"
    )
    sweep_parser.add_argument(
        "--repeats", type=int, default=3, help="Runs per combination"
    )
    sweep_parser.add_argument(
        "--format", choices=["auto", "csv", "json"], default="auto",
        help="Input file format",
    )
    sweep_parser.add_argument("--seed", type=int, help="Base random seed")

    # Info command
    info_parser = subparsers.add_parser("info", help="Show model information")
    info_parser.add_argument("model", help="Trained model file")

    # Version command
    subparsers.add_parser("version", help="Show version information")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "solve":
        solve_command(args)
    elif args.command == "sweep":
        sweep_command(args)
    elif args.command == "info":
        info_command(args)
    elif args.command == "version":
        print(f"Ring SOM TSP CLI v{VERSION}")
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
