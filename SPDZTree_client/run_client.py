"""
run_client.py

Entrypoint: load field parameters and the local dataset, then run one training round
against the SPDZ engines. Everything that can fail locally is checked before any
network activity. Fatal errors exit with status 1.

    python -m SPDZTree_client.run_client <client_id> <engine_count> [dataset_name] [port_base]
"""

import argparse
import asyncio
import json
import sys

from . import constants, logger
from .channels import default_hosts
from .data_loader import check_fits_field, dataset_path, prepare_training_data, read_training_data
from .errors import ConfigurationError, SPDZClientError
from .privacy.field import load_field_config, params_file_path
from .session import open_session


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="SPDZ decision-tree training client")
    p.add_argument("client_id", type=int)
    p.add_argument("engine_count", type=int)
    p.add_argument("dataset_name", nargs="?", default=None)
    p.add_argument("port_base", nargs="?", type=int, default=None)
    p.add_argument("--hosts", type=str, default=None, help="comma separated engine host names, in engine order")
    p.add_argument("--data-dir", type=str, default=None)
    p.add_argument("--params-file", type=str, default=None)
    p.add_argument("--prep-dir", type=str, default=None)
    p.add_argument("--config", type=str, default=None, help="JSON file merged into constants.DEFAULTS")
    p.add_argument("--authenticated-result", action="store_true")
    return p.parse_args(argv)


def load_config_file(path: str):
    try:
        with open(path, "r", encoding="utf-8") as f:
            overrides = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot load config file {path}: {e}") from e
    if not isinstance(overrides, dict):
        raise ConfigurationError(f"Config file {path} must hold a JSON object")
    constants.update_from_dict(overrides)
    logger.secure_log("info", "Loaded config overrides", keys=sorted(overrides))


async def main_async(args) -> int:
    if args.config:
        load_config_file(args.config)
    if args.engine_count < 1:
        raise ConfigurationError("engine_count must be at least 1")
    if args.client_id < 0:
        raise ConfigurationError("client_id must be non-negative")

    params_path = args.params_file or params_file_path(args.engine_count, args.prep_dir)
    field_config = load_field_config(params_path)
    logger.secure_log("info", "Initialised field", params=str(params_path),
                      prime_bits=field_config.prime.bit_length(), gf2n_degree=field_config.gf2n_degree)

    dataset_name = args.dataset_name or constants.DEFAULTS["DEFAULT_DATASET"]
    data_dir = args.data_dir or constants.DEFAULTS["DATA_DIR"]
    local_data = read_training_data(dataset_path(data_dir, dataset_name, args.client_id))
    training_data, training_labels = prepare_training_data(local_data, args.client_id)
    check_fits_field(training_data, field_config)
    if training_labels is not None:
        check_fits_field(training_labels, field_config)

    hosts = args.hosts.split(",") if args.hosts else default_hosts(args.engine_count)
    port_base = args.port_base if args.port_base is not None else constants.DEFAULTS["DEFAULT_PORT_BASE"]

    result = await open_session(
        field_config,
        args.client_id,
        args.engine_count,
        training_data,
        training_labels,
        hosts=hosts,
        port_base=port_base,
        authenticated_result=args.authenticated_result,
    )
    logger.secure_log("info", "SPDZ training time", elapsed_ms=round(result.elapsed_ms, 3),
                      result_index=result.result_index)
    return 0


def main(argv=None):
    args = parse_args(argv)
    try:
        code = asyncio.run(main_async(args))
    except SPDZClientError as e:
        logger.secure_log("error", "Fatal client error", err_type=type(e).__name__, err=str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print("Interrupted by user.")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
