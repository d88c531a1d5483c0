"""
CLI Interface for the Mention Analytics Engine

Provides command-line access to snapshot generation, dashboard queries,
spike alerts, simulated mentions and the daily scheduler.
"""

import argparse
import json
import logging
import sys
from datetime import datetime

from .errors import AnalyticsError


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def _parse_as_of(value):
    return datetime.fromisoformat(value) if value else None


def _print_json(data):
    print(json.dumps(data, indent=2, default=str))


def run_snapshot(args):
    """Generate a snapshot for one brand."""
    from .snapshots import SnapshotService

    service = SnapshotService()

    print(f"🚀 Generating {args.period} snapshot for {args.brand}...")
    outcome = service.run_snapshot(
        args.brand, args.period, as_of=_parse_as_of(args.as_of), persist=not args.no_persist
    )

    snapshot = outcome.snapshot
    print(f"   📊 Mentions: {snapshot.total}")
    print(f"   🎭 Sentiment score: {snapshot.sentiment_score:.3f}")
    print(f"   💬 Engagement score: {snapshot.engagement_score:.2f}")
    if outcome.spike is not None and outcome.spike.is_spike:
        print(f"   🚨 Spike: +{outcome.spike.spike_percentage}% vs baseline")

    if outcome.persisted:
        print(f"✅ Snapshot #{outcome.record_id} saved in {outcome.execution_time:.2f}s")
    elif outcome.persist_error:
        print(f"⚠️  Snapshot computed but not saved: {outcome.persist_error}")
    else:
        print("✅ Snapshot computed (not saved)")

    if args.json:
        _print_json(snapshot.to_dict())
    return 0


def show_overview(args):
    """Print the analytics overview for a brand."""
    from dashboard.data import DashboardService

    print(f"📊 Analytics overview for {args.brand} ({args.period})")
    print(f"{'='*50}")
    _print_json(DashboardService().overview(args.brand, args.period, as_of=_parse_as_of(args.as_of)))
    return 0


def show_summary(args):
    """Print the real-time summary and insights for a brand."""
    from dashboard.data import DashboardService

    print(f"📈 Real-time summary for {args.brand} ({args.period})")
    print(f"{'='*50}")
    summary = DashboardService().summary(args.brand, args.period, as_of=_parse_as_of(args.as_of))
    _print_json(summary["realTime"])

    print(f"\n💡 Insights:")
    for item in summary["insights"]:
        print(f"   [{item['type']}] {item['title']}: {item['message']}")
    return 0


def show_spikes(args):
    """Check today's mention volume against the trailing average."""
    from dashboard.data import DashboardService

    print(f"🔍 Checking mention spikes for {args.brand}...")
    result = DashboardService().spike_alerts(args.brand, as_of=_parse_as_of(args.as_of))

    if result["isSpike"]:
        print(f"🚨 Spike detected: {result['todayCount']} mentions today "
              f"(+{result['spikePercentage']}% vs {result['weeklyAverage']:.1f}/day)")
    else:
        print(f"✅ No spike: {result['todayCount']} mentions today "
              f"vs {result['weeklyAverage']:.1f}/day")
    if args.json:
        _print_json(result)
    return 0


def show_widget(args):
    """Print the data for one dashboard widget."""
    from dashboard.data import DashboardService

    options = json.loads(args.options) if args.options else None
    print(f"🧩 {args.type} widget for {args.brand}")
    _print_json(DashboardService().widget(args.brand, args.type, options))
    return 0


def run_simulation(args):
    """Store simulated mentions for a brand."""
    from .ingest import MentionIngestor
    from .store import MentionStore

    ingestor = MentionIngestor(MentionStore())

    print(f"🎲 Simulating {args.count} mentions for {args.brand}...")
    print(f"   📅 Days back: {args.days_back}")
    mentions = ingestor.simulate(args.brand, args.count, seed=args.seed, days_back=args.days_back)
    print(f"✅ Stored {len(mentions)} mentions")
    return 0


def run_scheduler(args):
    """Run the daily snapshot job, once or as a service."""
    from .scheduler import AnalyticsScheduler

    scheduler = AnalyticsScheduler(workers=args.workers)

    if args.run_now:
        results = scheduler.run_daily_snapshots(args.period)
        failed = [brand for brand, result in results.items() if not result["success"]]
        for brand, result in sorted(results.items()):
            status = "✅" if result["success"] else "❌"
            print(f"   {status} {brand}: {result.get('record_id') or result.get('error')}")
        return 1 if failed else 0

    scheduler.install_signal_handlers()
    scheduler.start()
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Mention Analytics - Brand mention snapshots, dashboards and spike alerts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m analytics simulate Acme --count 50 --seed 1
  python -m analytics snapshot Acme --period weekly
  python -m analytics overview Acme --period 30d
  python -m analytics widget Acme topics --options '{"maxTopics": 3}'
  python -m analytics scheduler --run-now
        """
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Snapshot command
    snapshot_parser = subparsers.add_parser('snapshot', help='Generate an analytics snapshot')
    snapshot_parser.add_argument('brand', help='Brand name')
    snapshot_parser.add_argument('--period', choices=['daily', 'weekly', 'monthly'], default='daily', help='Snapshot period')
    snapshot_parser.add_argument('--as-of', help='End of the window (ISO timestamp), defaults to now')
    snapshot_parser.add_argument('--no-persist', action='store_true', help='Compute without saving')
    snapshot_parser.add_argument('--json', action='store_true', help='Print the snapshot document')

    # Overview command
    overview_parser = subparsers.add_parser('overview', help='Show the analytics overview')
    overview_parser.add_argument('brand', help='Brand name')
    overview_parser.add_argument('--period', default='7d', help='Time range (7d, 30d, 90d)')
    overview_parser.add_argument('--as-of', help='End of the time range (ISO timestamp)')

    # Summary command
    summary_parser = subparsers.add_parser('summary', help='Show the real-time summary and insights')
    summary_parser.add_argument('brand', help='Brand name')
    summary_parser.add_argument('--period', default='7d', help='Time range (7d, 30d, 90d)')
    summary_parser.add_argument('--as-of', help='End of the time range (ISO timestamp)')

    # Spikes command
    spikes_parser = subparsers.add_parser('spikes', help='Check for a mention volume spike')
    spikes_parser.add_argument('brand', help='Brand name')
    spikes_parser.add_argument('--as-of', help='Instant to evaluate (ISO timestamp)')
    spikes_parser.add_argument('--json', action='store_true', help='Print the raw result')

    # Widget command
    widget_parser = subparsers.add_parser('widget', help='Show data for one dashboard widget')
    widget_parser.add_argument('brand', help='Brand name')
    widget_parser.add_argument('type', help='Widget type (sentiment, sources, timeline, topics, metrics, engagement, alerts)')
    widget_parser.add_argument('--options', help='Widget configuration as JSON')

    # Simulate command
    simulate_parser = subparsers.add_parser('simulate', help='Store simulated mentions')
    simulate_parser.add_argument('brand', help='Brand name')
    simulate_parser.add_argument('--count', type=int, default=10, help='Number of mentions')
    simulate_parser.add_argument('--seed', type=int, help='Random seed for reproducible output')
    simulate_parser.add_argument('--days-back', type=int, default=7, help='Spread mentions over this many days')

    # Scheduler command
    scheduler_parser = subparsers.add_parser('scheduler', help='Run the daily snapshot scheduler')
    scheduler_parser.add_argument('--run-now', action='store_true', help='Run the snapshot job once and exit')
    scheduler_parser.add_argument('--period', default='daily', help='Snapshot period for --run-now')
    scheduler_parser.add_argument('--workers', type=int, help='Worker threads, defaults to SNAPSHOT_WORKERS')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Setup logging
    setup_logging(args.verbose)

    commands = {
        'snapshot': run_snapshot,
        'overview': show_overview,
        'summary': show_summary,
        'spikes': show_spikes,
        'widget': show_widget,
        'simulate': run_simulation,
        'scheduler': run_scheduler,
    }

    try:
        return commands[args.command](args)
    except (AnalyticsError, ValueError) as e:
        print(f"❌ {args.command} failed: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
