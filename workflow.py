"""
Calculation workflow for the NEN 2057 daylight check.

Builds the scene index once, processes every selected window (glass area,
α, β), aggregates per habitable area and writes results back onto the model.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from models.building import Window
from models.calculation_result import ComplianceReport, DaylightRunResult, WindowResult
from core import ComplianceAggregator, DaylightCalculator, ParameterWriteError, SceneIndex
from importers import AreaPolygonSource, ModelQuery, ParameterAccess, WindowParameterAdapter
from utils.config_loader import DaylightConfig, get_config_value, load_config
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def load_run_config(config_path: Optional[str] = None) -> DaylightConfig:
    """
    Load config.yaml, set up logging at its configured level and return the
    run configuration.

    Args:
        config_path: Path to config.yaml; defaults to the one next to this module

    Returns:
        DaylightConfig (defaults for keys the file does not set)
    """
    path = Path(config_path) if config_path else Path(__file__).parent / "config.yaml"
    config = load_config(str(path))
    setup_logging(get_config_value(config, 'logging.level', 'INFO'))
    if not config:
        logger.warning(f"No configuration loaded from {path}, using defaults")
    return DaylightConfig.from_config(config)


def calculate_windows(windows: List[Window], scene: SceneIndex, config: DaylightConfig) -> List[WindowResult]:
    """
    Run the daylight calculator on every window.

    A failure in one window is logged and leaves that window with a
    message only; the rest of the batch continues.
    """
    calculator = DaylightCalculator(scene, config)
    results = []

    total = len(windows)
    if total == 0:
        logger.warning("No windows selected - skipping daylight calculation")
        return results

    for idx, window in enumerate(windows, 1):
        logger.info(f"[{idx}/{total}] Processing window: {window.display_code}")
        try:
            result = calculator.process_window(window)
        except Exception as e:
            logger.error(f"Error processing window {window.id}: {e}", exc_info=True)
            result = WindowResult(window_id=window.id, message=f"Fout in berekening: {e}")
        results.append(result)

        alpha = f"{result.alpha_avg_deg:.2f}°" if result.alpha_avg_deg is not None else '-'
        beta = f"{result.beta_deg:.2f}°" if result.beta_deg is not None else '-'
        glass = f"{result.glass_m2:.3f} m²" if result.glass_m2 is not None else '-'
        logger.info(f"  Window {window.id}: α={alpha}, β={beta}, Ad={glass}")

    return results


def write_back(
    adapter: WindowParameterAdapter,
    results: List[WindowResult],
    report: Optional[ComplianceReport]
) -> List[str]:
    """
    Best-effort write of computed values onto the windows.

    Returns:
        Warning messages for writes the host rejected
    """
    warnings = []
    cbi_by_area: Dict[str, float] = {}
    if report is not None:
        cbi_by_area = {a.area_id: a.cbi for a in report.areas}

    written = 0
    for result in results:
        try:
            written += adapter.write_window_result(result)
        except ParameterWriteError as e:
            msg = f"Could not write results to window {result.window_id}: {e}"
            logger.warning(msg)
            warnings.append(msg)

    if report is not None:
        for record in report.windows:
            try:
                written += adapter.write_compliance(record, cbi_by_area.get(record.area_id))
            except ParameterWriteError as e:
                msg = f"Could not write compliance to window {record.window_id}: {e}"
                logger.warning(msg)
                warnings.append(msg)

    logger.info(f"Wrote {written} parameter value(s) back to the model")
    return warnings


def run_daylight_check(
    model: ModelQuery,
    parameters: ParameterAccess,
    area_source: Optional[AreaPolygonSource] = None,
    config: Optional[DaylightConfig] = None,
    write_results: bool = True
) -> DaylightRunResult:
    """
    Full NEN 2057 run over all windows of a model.

    Args:
        model: Model query (host model with its links)
        parameters: Parameter access for reading frame data and writing results
        area_source: Habitable-area polygons; compliance is skipped when None
        config: Run configuration (defaults when None)
        write_results: Write α, β, Ad, Cb, Ae and Cbi back onto the windows

    Returns:
        DaylightRunResult with per-window results and the compliance report
    """
    config = config or DaylightConfig()
    logger.info("Starting daylight calculation")
    logger.info(
        f"α {'on' if config.do_alpha else 'off'}, β {'on' if config.do_beta else 'off'}, "
        f"glass {'on' if config.do_glass else 'off'}"
    )

    scene = SceneIndex.build(model)
    logger.info(f"Scene index holds {len(scene)} obstruction(s)")

    adapter = WindowParameterAdapter(parameters, model)
    windows = [adapter.build_window(record) for record in model.window_records()]
    results = calculate_windows(windows, scene, config)

    run = DaylightRunResult(window_results=results)
    if area_source is not None:
        areas = area_source.areas()
        logger.info(f"Aggregating {len(windows)} window(s) over {len(areas)} habitable area(s)")
        run.compliance = ComplianceAggregator(config.required_ratio).aggregate(results, windows, areas)

    if write_results:
        run.warnings.extend(write_back(adapter, results, run.compliance if area_source is not None else None))

    logger.info("Daylight calculation complete")
    return run
