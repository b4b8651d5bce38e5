# logger_setup.py

import logging
import os
import json

LOGGER_NAME = "stellar_cycle"


def setup_logging(config_path='config.json'):
    """
    Routes the star lifecycle log to runs/<run_id>/simulation.log and the console.

    Every module logs through logging.getLogger("stellar_cycle"): state changes,
    star creation, death-branch resolution and legacy updates at INFO; particle
    bursts, ignored input and the main loop's per-100-frame counters at DEBUG.
    The logger does not propagate, so pygame and Numba output stays out of the run log.
    Calling this again (e.g. on a second run in the same process) replaces the
    previous handlers instead of stacking them.

    Data Contract:
    - Inputs: config_path (str) - Path to config.json ('run_id', 'logging.level',
      'logging.format').
    - Outputs: logging.Logger - The configured "stellar_cycle" logger.
    - Side Effects: Creates runs/<run_id>/ relative to the working directory.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)

    run_id = config['run_id']
    log_config = config['logging']

    # --- Get a dedicated logger for the application ---
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_config['level'])
    logger.propagate = False

    # --- Create directories for logs ---
    log_dir = os.path.join('runs', run_id)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'simulation.log')

    formatter = logging.Formatter(log_config['format'])

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    # Clear existing handlers to avoid duplication if this function is called again
    if logger.hasHandlers():
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return logger
