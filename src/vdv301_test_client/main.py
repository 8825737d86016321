"""
Main entry point for the VDV-301 MQTT test client.

This module is responsible for:
- Setting up logging.
- Loading config.yaml from the working directory.
- Building the request script and handing it to the MQTTManager.
- Turning fatal broker errors into a non-zero exit status.
"""

import asyncio
import logging
import sys

from typing import Any, Dict

import yaml
from aiomqtt import MqttError

from vdv301_test_client.config_loader import load_config
from vdv301_test_client.mqtt import MQTTManager
from vdv301_test_client.sequence import RequestFixtures, build_test_sequence

def setup_logging():
    """
    Configures the global logging settings for the entire application.
    This should be called as early as possible during startup.
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)-8s] %(name)s.%(funcName)s: %(message)s'
    )

logger = logging.getLogger(__name__)

async def main_application_runner():
    setup_logging()

    config: Dict[str, Any] = load_config("config.yaml")
    logging.getLogger().setLevel(str(config.get('log_level', 'INFO')).upper())

    fixtures = RequestFixtures.from_config(config)
    steps = build_test_sequence(fixtures)
    delay = float(config.get('publish_delay', 1.0))

    mqtt_manager = MQTTManager(config=config)
    await mqtt_manager.run(steps, delay=delay)

def run():
    """Console script entry point, runs until the process is interrupted."""
    try:
        asyncio.run(main_application_runner())
    except KeyboardInterrupt:
        pass
    except MqttError as e:
        logger.critical(f"Broker error, cannot continue: {e}")
        sys.exit(1)
    except (yaml.YAMLError, ValueError) as e:
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

if __name__ == "__main__":
    run()
