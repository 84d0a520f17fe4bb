"""
Main analysis entry point
Runs the bike demand ARIMA workflow from the command line
"""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import CONFIG_PATH, OUTPUT_DIR
from bike_demand.pipeline import run_analysis
from bike_demand.utils import load_config

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="ARIMA demand forecasting for daily bike rentals")
    parser.add_argument('--config', default=str(CONFIG_PATH),
                        help="YAML run configuration (default: config/arima_config.yaml)")
    parser.add_argument('--data', help="CSV of daily records; overrides data.path")
    parser.add_argument('--output-dir', default=str(OUTPUT_DIR),
                        help="Directory for plots, model and results")
    parser.add_argument('--horizon', type=int, help="Forecast horizon in days")
    parser.add_argument('--holdout', type=int, help="Days held back for the holdout test")
    parser.add_argument('--seasonal', action='store_true',
                        help="Also run the seasonal auto_arima refit")
    parser.add_argument('--show-plots', action='store_true', help="Display plots interactively")
    parser.add_argument('--verbose', action='store_true', help="Debug logging")
    return parser.parse_args(argv)


def apply_overrides(config, args):
    if args.data:
        config['data']['path'] = args.data
    if args.horizon is not None:
        config['forecast']['horizon'] = args.horizon
    if args.holdout is not None:
        config['evaluation']['holdout'] = args.holdout
    if args.seasonal:
        config['model']['seasonal_search'] = True
    if args.show_plots:
        config['output']['show_plots'] = True
    return config


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    try:
        config = apply_overrides(load_config(args.config), args)
        results = run_analysis(config, output_dir=args.output_dir)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"❌ {e}")
        return 1

    manual = results['manual_fit']
    metrics = results['holdout']['metrics']

    # ===========================
    # FINAL SUMMARY
    # ===========================
    print("\n" + "=" * 80)
    print("ANALYSIS COMPLETE!")
    print("=" * 80)

    print(f"\n📊 Auto-selected model:  ARIMA{results['auto_model']['order']}")
    print(f"📊 Manual model:         ARIMA{manual['order']} (AIC {manual['aic']:.2f})")
    print(f"   Ljung-Box p-value:    {manual['diagnostics']['lb_pvalue']:.4f}")

    print("\n📊 Holdout Metrics:")
    print(f"   RMSE:  {metrics['rmse']:.2f}")
    print(f"   MAE:   {metrics['mae']:.2f}")
    print(f"   MAPE:  {metrics['mape']:.2f}%")

    print(f"\n📦 Results: {results['artifacts']['summary']}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
