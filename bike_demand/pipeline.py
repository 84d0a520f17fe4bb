"""
Bike demand ARIMA pipeline
Complete workflow from data loading to forecast and holdout check
"""
import json
import logging
from pathlib import Path

import numpy as np
import pandas as pd

from config.settings import COUNT_COLUMN, DERIVED_COLUMNS, OUTPUT_DIR
from bike_demand.cleaning import add_clean_column
from bike_demand.correlation import suggest_orders
from bike_demand.data_loader import load_daily_counts
from bike_demand.decomposition import add_deseasonalized_column, decompose_stl
from bike_demand.diagnostics import (
    burn_in_residuals,
    diagnostic_tests,
    residual_summary,
    significant_residual_lags,
)
from bike_demand.evaluation import evaluate_holdout
from bike_demand.model import fit_arima, forecast, save_model, select_order_auto
from bike_demand.smoothing import add_moving_averages
from bike_demand.stationarity import difference_series, find_differencing_order, perform_adf_test
from bike_demand.utils import ensure_dir, load_config, resolve_path
from bike_demand import visualization as viz

logger = logging.getLogger(__name__)


def _step(title):
    print(f"\n{title}")
    print("-" * 80)


def _model_report(fitted_model, order, residuals, config):
    diagnostics_cfg = config['diagnostics']
    return {
        'order': tuple(int(v) for v in order),
        'aic': float(fitted_model.aic),
        'bic': float(fitted_model.bic),
        'diagnostics': diagnostic_tests(residuals, lags=diagnostics_cfg['lags']),
        'residual_summary': residual_summary(residuals),
        'significant_residual_lags': significant_residual_lags(
            residuals, nlags=diagnostics_cfg['residual_nlags']
        ),
    }


def _to_jsonable(value):
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if hasattr(value, 'item'):
        value = value.item()
    if isinstance(value, float) and not np.isfinite(value):
        return None
    return value


def build_summary(results):
    """JSON-friendly summary of a run_analysis result."""
    summary = {
        'timestamp': pd.Timestamp.now().isoformat(),
        'n_observations': len(results['data']),
        'date_range': [
            results['data'].index.min().isoformat(),
            results['data'].index.max().isoformat(),
        ],
        'n_outliers': int(results['data'][DERIVED_COLUMNS['outlier']].sum()),
        'adf_weekly_ma': results['adf_weekly_ma'],
        'differencing_order': results['differencing']['d'],
        'suggested_orders': results['suggested_orders'],
        'auto_model': {
            key: value for key, value in results['auto_model'].items() if key != 'model'
        },
        'auto_fit': results['auto_fit'],
        'manual_fit': results['manual_fit'],
        'holdout_metrics': results['holdout']['metrics'],
    }
    if results.get('seasonal_model') is not None:
        summary['seasonal_model'] = {
            key: value for key, value in results['seasonal_model'].items() if key != 'model'
        }
    return _to_jsonable(summary)


def run_analysis(config=None, output_dir=None):
    """
    Run the whole analysis in order and save its artifacts.

    Parameters:
    -----------
    config : dict, optional
        Configuration as returned by load_config (defaults if None)
    output_dir : str or Path, optional
        Where plots, model, CSVs and the JSON summary go (default: output/)

    Returns:
    --------
    dict : Every intermediate result, keyed by stage
    """
    if config is None:
        config = load_config()
    output_dir = ensure_dir(output_dir or OUTPUT_DIR)
    output_cfg = config['output']
    plots_dir = output_dir / 'plots' if output_cfg['save_plots'] else None
    show = output_cfg['show_plots']

    def plot_path(name):
        return plots_dir / f"{name}.png" if plots_dir is not None else None

    viz.apply_plot_style()
    results = {}

    print("=" * 80)
    print("BIKE DEMAND ARIMA ANALYSIS")
    print("=" * 80)

    # ===========================
    # STEP 1: Load Data
    # ===========================
    _step("STEP 1: Loading Data")
    data_cfg = config['data']
    df = load_daily_counts(
        resolve_path(data_cfg['path']),
        date_column=data_cfg['date_column'],
        count_column=data_cfg['count_column'],
    )
    print(f"✓ Loaded data shape: {df.shape}")
    viz.plot_daily_counts(df[COUNT_COLUMN], save_path=plot_path('01_daily_counts'), show=show)

    # ===========================
    # STEP 2: Clean Outliers
    # ===========================
    _step("STEP 2: Cleaning Outliers")
    cleaning_cfg = config['cleaning']
    df = add_clean_column(
        df,
        iqr_multiplier=cleaning_cfg['iqr_multiplier'],
        frac=cleaning_cfg['smoother_frac'],
    )
    print(f"✓ Outliers replaced: {int(df[DERIVED_COLUMNS['outlier']].sum())}")
    viz.plot_cleaned_vs_raw(
        df[COUNT_COLUMN], df[DERIVED_COLUMNS['clean']], df[DERIVED_COLUMNS['outlier']],
        save_path=plot_path('02_cleaned'), show=show,
    )

    # ===========================
    # STEP 3: Moving Averages
    # ===========================
    _step("STEP 3: Smoothing with Moving Averages")
    smoothing_cfg = config['smoothing']
    df = add_moving_averages(
        df,
        weekly_order=smoothing_cfg['weekly_order'],
        monthly_order=smoothing_cfg['monthly_order'],
    )
    viz.plot_moving_averages(
        df, DERIVED_COLUMNS['clean'],
        {
            DERIVED_COLUMNS['weekly_ma']: 'Weekly Moving Average',
            DERIVED_COLUMNS['monthly_ma']: 'Monthly Moving Average',
        },
        save_path=plot_path('03_moving_averages'), show=show,
    )

    # ===========================
    # STEP 4: Deseasonalize
    # ===========================
    _step("STEP 4: STL Decomposition and Seasonal Adjustment")
    decomposition_cfg = config['decomposition']
    decomposition = decompose_stl(
        df[DERIVED_COLUMNS['weekly_ma']],
        period=decomposition_cfg['period'],
        robust=decomposition_cfg['robust'],
    )
    df = add_deseasonalized_column(df, decomposition=decomposition)
    deseasonal = df[DERIVED_COLUMNS['deseasonal']]
    results['decomposition'] = decomposition
    viz.plot_decomposition(decomposition, save_path=plot_path('04_decomposition'), show=show)

    # ===========================
    # STEP 5: Stationarity
    # ===========================
    _step("STEP 5: Stationarity (ADF Test)")
    stationarity_cfg = config['stationarity']
    results['adf_weekly_ma'] = perform_adf_test(
        df[DERIVED_COLUMNS['weekly_ma']],
        alpha=stationarity_cfg['alpha'],
        regression=stationarity_cfg['regression'],
    )
    differencing = find_differencing_order(
        deseasonal,
        max_d=stationarity_cfg['max_d'],
        alpha=stationarity_cfg['alpha'],
        regression=stationarity_cfg['regression'],
    )
    d = differencing['d']
    results['differencing'] = differencing
    print(f"✓ Differencing order: d={d}")

    # ===========================
    # STEP 6: ACF / PACF
    # ===========================
    _step("STEP 6: Autocorrelation Analysis")
    nlags = config['correlation']['nlags']
    model_cfg = config['model']
    differenced = difference_series(deseasonal, d)
    results['suggested_orders'] = suggest_orders(
        differenced, nlags=nlags, max_p=model_cfg['max_p'], max_q=model_cfg['max_q']
    )
    print(
        f"✓ Suggested from ACF/PACF: p={results['suggested_orders']['p']}, "
        f"q={results['suggested_orders']['q']}"
    )
    viz.plot_acf_pacf(df[DERIVED_COLUMNS['weekly_ma']], nlags=nlags, title='Weekly Moving Average',
                      save_path=plot_path('05_acf_pacf_ma'), show=show)
    viz.plot_acf_pacf(differenced, nlags=nlags, title=f'Deseasonalized, d={d}',
                      save_path=plot_path('06_acf_pacf_differenced'), show=show)

    # ===========================
    # STEP 7: Automatic Order Selection
    # ===========================
    _step("STEP 7: Automatic ARIMA Order Selection")
    auto_model = select_order_auto(
        deseasonal,
        d=d,
        seasonal=False,
        max_p=model_cfg['max_p'],
        max_q=model_cfg['max_q'],
        information_criterion=model_cfg['information_criterion'],
    )
    results['auto_model'] = auto_model
    auto_fitted = fit_arima(deseasonal, auto_model['order'])
    auto_residuals = burn_in_residuals(auto_fitted)
    results['auto_fit'] = _model_report(auto_fitted, auto_model['order'], auto_residuals, config)
    print(f"✓ auto_arima selected ARIMA{auto_model['order']}")
    viz.plot_residual_display(
        auto_residuals, nlags=config['diagnostics']['residual_nlags'],
        title=f"Residuals ARIMA{auto_model['order']}",
        save_path=plot_path('07_residuals_auto'), show=show,
    )

    # ===========================
    # STEP 8: Manual Refit
    # ===========================
    manual_order = tuple(model_cfg['manual_order'])
    _step(f"STEP 8: Refit with Manual Order ARIMA{manual_order}")
    manual_fitted = fit_arima(deseasonal, manual_order)
    manual_residuals = burn_in_residuals(manual_fitted)
    results['manual_fit'] = _model_report(manual_fitted, manual_order, manual_residuals, config)
    results['model'] = manual_fitted
    df[DERIVED_COLUMNS['residuals']] = manual_residuals.reindex(df.index)
    print(f"✓ Ljung-Box p-value: {results['manual_fit']['diagnostics']['lb_pvalue']:.4f}")
    viz.plot_residual_display(
        manual_residuals, nlags=config['diagnostics']['residual_nlags'],
        title=f"Residuals ARIMA{manual_order}",
        save_path=plot_path('08_residuals_manual'), show=show,
    )
    viz.plot_residual_diagnostics(manual_residuals, save_path=plot_path('09_residual_diagnostics'),
                                  show=show)

    # ===========================
    # STEP 9: Forecast
    # ===========================
    forecast_cfg = config['forecast']
    _step(f"STEP 9: Forecasting {forecast_cfg['horizon']} Days Ahead")
    forecast_frame = forecast(manual_fitted, steps=forecast_cfg['horizon'],
                              levels=forecast_cfg['levels'])
    results['forecast'] = forecast_frame
    viz.plot_forecast(deseasonal.dropna(), forecast_frame, title=f"Forecast ARIMA{manual_order}",
                      save_path=plot_path('10_forecast'), show=show)

    # ===========================
    # STEP 10: Holdout Test
    # ===========================
    holdout_size = config['evaluation']['holdout']
    _step(f"STEP 10: Holdout Test (last {holdout_size} days)")
    holdout = evaluate_holdout(deseasonal, manual_order, holdout=holdout_size,
                               levels=forecast_cfg['levels'])
    results['holdout'] = holdout
    viz.plot_holdout(holdout['train'], holdout['test'], holdout['forecast'], holdout['metrics'],
                     save_path=plot_path('11_holdout'), show=show)

    # ===========================
    # STEP 11: Seasonal Refit (optional)
    # ===========================
    results['seasonal_model'] = None
    results['seasonal_forecast'] = None
    if model_cfg['seasonal_search']:
        _step("STEP 11: Seasonal auto_arima Refit")
        seasonal_model = select_order_auto(
            deseasonal,
            seasonal=True,
            m=model_cfg['seasonal_period'],
            max_p=model_cfg['max_p'],
            max_q=model_cfg['max_q'],
            information_criterion=model_cfg['information_criterion'],
        )
        seasonal_fitted = fit_arima(deseasonal, seasonal_model['order'],
                                    seasonal_order=seasonal_model['seasonal_order'])
        seasonal_forecast = forecast(seasonal_fitted, steps=forecast_cfg['horizon'],
                                     levels=forecast_cfg['levels'])
        results['seasonal_model'] = seasonal_model
        results['seasonal_forecast'] = seasonal_forecast
        viz.plot_forecast(deseasonal.dropna(), seasonal_forecast,
                          title=f"Seasonal Forecast ARIMA{seasonal_model['order']}"
                                f"{seasonal_model['seasonal_order']}",
                          save_path=plot_path('12_seasonal_forecast'), show=show)

    results['data'] = df

    # ===========================
    # Save Artifacts
    # ===========================
    _step("Saving Artifacts")
    p, d_manual, q = manual_order
    model_path = save_model(manual_fitted, output_dir / 'models' / f"arima_{p}_{d_manual}_{q}_daily.pkl")
    data_path = output_dir / 'annotated_series.csv'
    df.to_csv(data_path)
    forecast_path = output_dir / 'forecast.csv'
    forecast_frame.to_csv(forecast_path)

    summary = build_summary(results)
    summary_path = output_dir / 'arima_results.json'
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=4, allow_nan=False)

    results['summary'] = summary
    results['artifacts'] = {
        'model': Path(model_path),
        'data': data_path,
        'forecast': forecast_path,
        'summary': summary_path,
        'plots': plots_dir,
    }
    for name, path in results['artifacts'].items():
        if path is not None:
            print(f"✓ {name:<9} {path}")

    logger.info(f"✓ Analysis finished, artifacts in {output_dir}")
    return results
