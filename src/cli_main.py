#!/usr/bin/env python3
"""
Access Log Toolkit - unique visitors, top URLs and top IPs of an access log
Usage: snap-accesslog <command> [options]
"""

import argparse
import json
import logging
import os
import random
import sys
import time
from datetime import datetime, timedelta

VERSION = "1.0"


def build_parser():
    parser = argparse.ArgumentParser(
        prog='snap-accesslog',
        description='Access Log Toolkit - unique visitors, top URLs and top IPs',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze an access log and save the JSON report
  snap-accesslog analyze access.log

  # Analyze and generate a dashboard
  snap-accesslog analyze access.log --visualize

  # Visualize an existing JSON report
  snap-accesslog visualize log_analysis_20231201_120000.json

  # Generate a test log with 5% malformed lines
  snap-accesslog generate-test --lines 5000 --output ./test.log --malformed-ratio 0.05

  # Show system info
  snap-accesslog info
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # ==================== ANALYZE COMMAND ====================
    analyze_parser = subparsers.add_parser('analyze', help='Analyze log file')
    analyze_parser.add_argument('logfile', help='Path to log file')
    analyze_parser.add_argument('--output', help='Custom output filename')
    analyze_parser.add_argument('--visualize', action='store_true',
                                help='Generate visualization after analysis')
    analyze_parser.add_argument('--quiet', action='store_true',
                                help='Suppress malformed line warnings')

    # ==================== VISUALIZE COMMAND ====================
    visualize_parser = subparsers.add_parser('visualize', help='Visualize JSON report')
    visualize_parser.add_argument('json_file', help='Path to JSON report file')
    visualize_parser.add_argument('--theme', choices=['whitegrid', 'darkgrid', 'white', 'dark', 'ticks'],
                                  default='whitegrid', help='Seaborn theme style')
    visualize_parser.add_argument('--palette', default='viridis',
                                  help='Color palette for charts')
    visualize_parser.add_argument('--size', choices=['small', 'medium', 'large', 'xlarge'],
                                  default='medium', help='Figure size')
    visualize_parser.add_argument('--dpi', type=int, default=150,
                                  help='Output DPI (default: 150)')
    visualize_parser.add_argument('--no-values', action='store_true',
                                  help='Hide values on bars')
    visualize_parser.add_argument('--output-dir', default='reports',
                                  help='Output directory')
    visualize_parser.add_argument('--title', help='Custom dashboard title')

    # ==================== GENERATE-TEST COMMAND ====================
    generate_parser = subparsers.add_parser('generate-test',
                                            help='Generate test log file')
    generate_parser.add_argument('--lines', type=int, default=1000,
                                 help='Number of lines (default: 1000)')
    generate_parser.add_argument('--output', required=True,
                                 help='Output file path (required)')
    generate_parser.add_argument('--malformed-ratio', type=float, default=0.0,
                                 help='Share of malformed lines, 0 to 1 (default: 0)')
    generate_parser.add_argument('--seed', type=int,
                                 help='Random seed for reproducible output')
    generate_parser.add_argument('--overwrite', action='store_true',
                                 help='Overwrite existing file')

    # ==================== INFO COMMAND ====================
    subparsers.add_parser('info', help='Show system information')

    return parser


def configure_logging(quiet=False):
    logging.basicConfig(
        level=logging.ERROR if quiet else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


def print_analysis(result):
    print(f"Unique IP Addresses: {result.unique_address_count}")
    print("\nTop 3 URLs:")
    for url, count in result.top_urls:
        print(f"  {url}: {count} visits")

    print("\nTop 3 Active IPs:")
    for address, count in result.top_addresses:
        print(f"  {address}: {count} requests")


def run_analyze(args):
    from log_service import analyse_log_file, build_report

    if not os.path.exists(args.logfile):
        print(f"Error: File not found: {args.logfile}")
        return 1

    print(f"Analyzing: {args.logfile}")

    start_time = time.time()
    analysis = analyse_log_file(args.logfile)
    elapsed = time.time() - start_time

    stats = build_report(analysis, args.logfile, elapsed)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_file = args.output or f"log_analysis_{timestamp}.json"

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(stats, f, indent=2)

    print()
    print_analysis(analysis.result)

    print(f"\nAnalysis completed in {elapsed:.2f}s")
    print(f"Report saved to: {output_file}")
    print(f"Total lines: {analysis.total_lines:,}")
    if analysis.skipped_lines:
        print(f"Skipped lines: {analysis.skipped_lines:,}")

    if args.visualize:
        from log_visualizer import visualize_results

        print("\nGenerating visualization...")
        viz_file = visualize_results(stats, f"dashboard_{timestamp}")
        print(f"Visualization saved to: {viz_file}")

    return 0


def run_visualize(args):
    from log_visualizer import load_stats_from_json, visualize_results

    print(f"Visualizing: {args.json_file}")
    print(f"Theme: {args.theme}")
    print(f"Palette: {args.palette}")

    if not os.path.exists(args.json_file):
        print(f"Error: File not found: {args.json_file}")
        return 1

    stats = load_stats_from_json(args.json_file)

    output_file = visualize_results(
        stats,
        output_filename_base=f"dashboard_{datetime.now().strftime('%Y%m%d_%H%M%S')}",
        output_dir=args.output_dir,
        theme=args.theme,
        palette=args.palette,
        size=args.size,
        dpi=args.dpi,
        show_values=not args.no_values,
        title=args.title,
    )

    print(f"\nVisualization completed!")
    print(f"Dashboard saved to: {output_file}")
    return 0


def run_generate_test(args):
    print(f"Generating test log...")
    print(f"Lines: {args.lines:,}")
    print(f"Output: {args.output}")

    if not 0.0 <= args.malformed_ratio <= 1.0:
        print(f"Error: --malformed-ratio must be between 0 and 1, got {args.malformed_ratio}")
        return 1

    output_dir = os.path.dirname(args.output)
    if output_dir and not os.path.exists(output_dir):
        print(f"Creating directory: {output_dir}")
        os.makedirs(output_dir, exist_ok=True)

    if os.path.exists(args.output) and not args.overwrite:
        print(f"Error: File already exists: {args.output}")
        print("Use --overwrite flag to overwrite")
        return 1

    test_file = generate_test_log(
        filename=args.output,
        num_lines=args.lines,
        malformed_ratio=args.malformed_ratio,
        seed=args.seed,
    )

    file_size = os.path.getsize(test_file)
    print(f"\nTest log generated successfully!")
    print(f"File: {test_file}")
    print(f"Size: {file_size / 1024:.1f} KB ({file_size:,} bytes)")

    print(f"\nSample of first 3 lines:")
    with open(test_file, 'r', encoding='utf-8') as f:
        for i, line in enumerate(f):
            if i >= 3:
                break
            print(f"  {line.strip()}")
    return 0


def run_info(args):
    import platform

    import psutil

    print("SYSTEM INFORMATION")
    print("-" * 40)
    print(f"Python: {platform.python_version()}")
    print(f"OS: {platform.system()} {platform.release()}")
    print(f"CPU: {psutil.cpu_count()} cores")
    print(f"Memory: {psutil.virtual_memory().total / 1024**3:.1f} GB")
    print(f"Disk: {psutil.disk_usage(os.path.abspath(os.sep)).free / 1024**3:.1f} GB free")

    print("\nINSTALLED PACKAGES")
    print("-" * 40)
    packages = ['matplotlib', 'seaborn', 'pandas', 'psutil']
    for pkg in packages:
        try:
            module = __import__(pkg)
            print(f"✓ {pkg}: {getattr(module, '__version__', 'unknown')}")
        except ImportError:
            print(f"✗ {pkg}: Not installed")
    return 0


COMMANDS = {
    'analyze': run_analyze,
    'visualize': run_visualize,
    'generate-test': run_generate_test,
    'info': run_info,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(quiet=getattr(args, 'quiet', False))

    # ==================== COMMAND ROUTING ====================
    print(f"Access Log Toolkit v{VERSION}")
    print(f"{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 60)

    try:
        return COMMANDS[args.command](args)
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user")
        return 0
    except Exception as e:
        print(f"\nError: {e}")
        import traceback
        traceback.print_exc()
        return 1


MALFORMED_LINES = [
    'This is an invalid line',
    'Corrupt data here',
    '{ip} - - [{timestamp}] "{method} {path}" {status} {size} "-" "{user_agent}"',
    '{ip} - - [{timestamp}] "{method} {path} HTTP/1.1" {status}',
    '{ip} - - [99/Foo/2023:99:99:99 +0300] "{method} {path} HTTP/1.1" {status} {size} "-" "{user_agent}"',
]


def format_timestamp(moment, offset='+0300'):
    from log_parser import MONTH_ABBREVIATIONS

    month_names = {number: name for name, number in MONTH_ABBREVIATIONS.items()}
    return f"{moment:%d}/{month_names[moment.month]}/{moment:%Y:%H:%M:%S} {offset}"


def generate_test_log(filename, num_lines, malformed_ratio=0.0, seed=None):
    """Generate a combined-format access log, optionally with malformed lines mixed in"""
    rng = random.Random(seed)

    methods = ['GET', 'POST', 'PUT', 'DELETE']
    statuses = ['200', '404', '500', '301', '400', '403']
    paths = ['/', '/index.html', '/api/users', '/api/data', '/admin', '/login', '/products', '/cart']
    user_agents = ['Mozilla/5.0', 'Chrome/91.0', 'Safari/14.0', 'PostmanRuntime/7.28']

    start_time = datetime(2023, 10, 10, 9, 0, 0)

    with open(filename, 'w', encoding='utf-8') as f:
        for i in range(num_lines):
            fields = {
                'ip': f"192.168.{rng.randint(1, 255)}.{rng.randint(1, 255)}",
                'timestamp': format_timestamp(start_time + timedelta(seconds=i * 2)),
                'method': rng.choice(methods),
                'path': rng.choice(paths),
                'status': rng.choice(statuses),
                'size': '-' if rng.random() < 0.05 else rng.randint(100, 10000),
                'user_agent': rng.choice(user_agents),
            }

            # Add query parameters sometimes
            if rng.random() < 0.3:
                fields['path'] += f'?id={rng.randint(1000, 9999)}'

            if malformed_ratio and rng.random() < malformed_ratio:
                f.write(rng.choice(MALFORMED_LINES).format(**fields) + '\n')
                continue

            referer = '-' if rng.random() < 0.5 else f"http://example.com{rng.choice(paths)}"
            f.write(
                f'{fields["ip"]} - - [{fields["timestamp"]}] "{fields["method"]} {fields["path"]} HTTP/1.1" '
                f'{fields["status"]} {fields["size"]} "{referer}" "{fields["user_agent"]}"\n'
            )

    return filename


if __name__ == "__main__":
    sys.exit(main())
