# logger_setup.py

import logging
import os
import json

LOGGER_NAME = "gas_laws"


def setup_logging(config_path='config.json'):
    """
    Routes the gas demo's log records to the console and to
    runs/<run_id>/simulation.log.

    What lands there: the throttled per-tick population summary, every
    rejected state edit (WARNING), constraint mode changes, and world and
    wall construction. Only the "gas_laws" logger is configured, so pygame
    and Numba output stays out of the file.

    Data Contract:
    - Inputs: config_path (str) - Path to the configuration file.
    - Outputs: logging.Logger - The configured "gas_laws" logger.
    - Side Effects:
        - Configures the "gas_laws" logger.
        - Creates directories for log files.
    - Invariants: Assumes the config file contains 'run_id' and a 'logging' dictionary
      with 'level' and 'format'.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)

    run_id = config['run_id']
    log_config = config['logging']

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_config['level'])
    logger.propagate = False

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
        logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return logger
