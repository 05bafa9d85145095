"""Configuration for faultline runs."""

from faultline.config.settings import FaultlineSettings, load_config

__all__ = ["FaultlineSettings", "load_config"]
