'''
Configuration management for volspec.

Settings are organized in dataclass sections and resolved in layers:
1. Defaults built into the package
2. A user configuration file (``volspec_config.json``)
3. Environment variables (``VOLSPEC_<SECTION>_<OPTION>``)
4. Runtime modifications through ``set_config``

The numerical section holds the tolerances that shape the parameter box
(``bound_epsilon``, ``shift_bound``, ``asymmetry_bound``) and the optimizer
settings used by ``VolatilityModel.fit``. The starting_values section holds
the fixed coefficients of the starting-value heuristic.
'''

import os
import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .exceptions import ConfigurationError
from .types import LogLevel

logger = logging.getLogger("volspec.core.config")

CONFIG_ENV_PREFIX = "VOLSPEC_"
DEFAULT_CONFIG_FILENAME = "volspec_config.json"
USER_CONFIG_DIR_ENV = "VOLSPEC_CONFIG_DIR"

_OPTIMIZATION_METHODS = ("L-BFGS-B", "SLSQP", "TNC", "trust-constr", "Powell")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class CoreConfig:
    """
    Core configuration settings.

    Attributes:
        version: The version of the configuration format
        user_config_dir: Directory holding the user configuration file
        random_seed: Default seed for simulation (None for fresh entropy)
    """
    version: str = "1.0"
    user_config_dir: Path = field(default_factory=lambda: Path.home() / ".volspec")
    random_seed: Optional[int] = None


@dataclass
class NumericalConfig:
    """
    Numerical configuration settings.

    Attributes:
        bound_epsilon: Margin keeping bounded coefficients off their open limits
        shift_bound: Symmetric bound on AGARCH shift coefficients
        asymmetry_bound: Symmetric bound on EGARCH asymmetry coefficients
        optimization_method: scipy.optimize.minimize method used for fitting
        max_iterations: Maximum number of optimizer iterations
        optimization_tol: Optimizer convergence tolerance
        penalty: Objective value returned for rejected candidates
    """
    bound_epsilon: float = 1e-6
    shift_bound: float = 10.0
    asymmetry_bound: float = 1.0
    optimization_method: str = "L-BFGS-B"
    max_iterations: int = 1000
    optimization_tol: float = 1e-8
    penalty: float = 1e10


@dataclass
class StartingValuesConfig:
    """
    Starting-value heuristic settings.

    Attributes:
        persistence: Value of the first variance-lag coefficient
        response: Value of the first shock-lag coefficient
        fill: Value of every other non-intercept coefficient
    """
    persistence: float = 0.8
    response: float = 0.05
    fill: float = 1e-6


@dataclass
class LoggingConfig:
    """
    Logging configuration settings.

    Attributes:
        log_level: Level of the ``volspec`` logger
        log_file: Path to log file (None for no file logging)
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to log to the console
        file_logging: Whether to log to ``log_file``
    """
    log_level: LogLevel = "WARNING"
    log_file: Optional[Path] = None
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = True
    file_logging: bool = False


@dataclass
class VolSpecConfig:
    """Complete configuration, one attribute per section."""
    core: CoreConfig = field(default_factory=CoreConfig)
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    starting_values: StartingValuesConfig = field(default_factory=StartingValuesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


SECTIONS: Tuple[str, ...] = tuple(f.name for f in fields(VolSpecConfig))


def _check_value(section: str, option: str, value: Any) -> Optional[str]:
    """Return a description of what is wrong with ``value``, or None if it is valid."""
    if section == "numerical":
        if option == "bound_epsilon" and not 0 < value < 0.5:
            return "must lie in (0, 0.5)"
        if option in ("shift_bound", "asymmetry_bound", "penalty") and not value > 0:
            return "must be positive"
        if option == "max_iterations" and value <= 0:
            return "must be positive"
        if option == "optimization_tol" and not 0 < value < 1:
            return "must lie in (0, 1)"
        if option == "optimization_method" and value not in _OPTIMIZATION_METHODS:
            return f"must be one of {', '.join(_OPTIMIZATION_METHODS)}"
    elif section == "starting_values":
        if option in ("persistence", "response", "fill") and not 0 <= value < 1:
            return "must lie in [0, 1)"
    elif section == "logging":
        if option == "log_level" and value not in _LOG_LEVELS:
            return f"must be one of {', '.join(_LOG_LEVELS)}"
    return None


def _coerce(current: Any, value: Any) -> Any:
    """Convert ``value`` to the type of the option's current value."""
    if current is None:
        return value
    if isinstance(current, bool) and isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "y")
    if isinstance(current, Path):
        return Path(value)
    if type(current) is not type(value):
        return type(current)(value)
    return value


class ConfigManager:
    """
    Holds the current configuration and layers the user file, the
    environment and runtime changes on top of the defaults.
    """

    def __init__(self):
        self._config = VolSpecConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys = set()

    def initialize(self) -> None:
        if self._initialized:
            return

        self._locate_user_config()
        self._load_user_config()
        self._apply_env_overrides()
        self._validate_config()
        self._setup_logging()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    # ---- layers ----

    def _locate_user_config(self) -> None:
        directory = os.environ.get(USER_CONFIG_DIR_ENV)
        if directory:
            self._config.core.user_config_dir = Path(directory)
        self._config_file = Path(self._config.core.user_config_dir) / DEFAULT_CONFIG_FILENAME

    def _load_user_config(self) -> None:
        if self._config_file is None or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            contents = json.loads(self._config_file.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable configuration file {self._config_file}: {e}")
            return

        for section, options in contents.items():
            if section not in SECTIONS or not isinstance(options, dict):
                logger.warning(f"Ignoring configuration section {section!r}")
                continue
            for option, value in options.items():
                self._apply_quietly(section, option, value, origin=str(self._config_file))

        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        """
        Apply ``VOLSPEC_<SECTION>_<OPTION>`` environment variables.

        Section names may contain underscores (``starting_values``), so the
        longest matching section prefix wins.
        """
        by_length = sorted(SECTIONS, key=len, reverse=True)

        for name, value in os.environ.items():
            if not name.startswith(CONFIG_ENV_PREFIX) or name == USER_CONFIG_DIR_ENV:
                continue
            key = name[len(CONFIG_ENV_PREFIX):].lower()
            section = next((s for s in by_length if key.startswith(s + "_")), None)
            if section is not None:
                self._apply_quietly(section, key[len(section) + 1:], value, origin=name)

    def _apply_quietly(self, section: str, option: str, value: Any, origin: str) -> None:
        # file and environment layers warn and carry on; range checks run afterwards
        target = getattr(self._config, section)
        if not hasattr(target, option):
            logger.warning(f"Unknown configuration option {section}.{option} in {origin}")
            return
        try:
            setattr(target, option, _coerce(getattr(target, option), value))
        except (TypeError, ValueError) as e:
            logger.warning(f"Cannot apply {section}.{option}={value!r} from {origin}: {e}")

    def _validate_config(self) -> None:
        """Reset out-of-range values to their defaults."""
        defaults = VolSpecConfig()
        for section in SECTIONS:
            current = getattr(self._config, section)
            for option in (f.name for f in fields(current)):
                value = getattr(current, option)
                try:
                    problem = _check_value(section, option, value)
                except TypeError:
                    problem = f"has invalid type {type(value).__name__}"
                if problem:
                    fallback = getattr(getattr(defaults, section), option)
                    logger.warning(f"{section}.{option}={value!r} {problem}; using {fallback!r}")
                    setattr(current, option, fallback)

    def _setup_logging(self) -> None:
        """Attach handlers and the level from the logging section to the ``volspec`` logger."""
        settings = self._config.logging
        package_logger = logging.getLogger("volspec")

        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
        package_logger.setLevel(getattr(logging, settings.log_level))

        formatter = logging.Formatter(fmt=settings.log_format, datefmt=settings.log_date_format)
        handlers = []
        if settings.console_logging:
            handlers.append(logging.StreamHandler())
        if settings.file_logging and settings.log_file:
            try:
                log_file = Path(settings.log_file)
                log_file.parent.mkdir(parents=True, exist_ok=True)
                handlers.append(logging.FileHandler(log_file))
            except OSError as e:
                logger.warning(f"File logging disabled: {e}")
        for handler in handlers:
            handler.setFormatter(formatter)
            package_logger.addHandler(handler)

    # ---- access ----

    def _section(self, section: str, option: Optional[str] = None) -> Any:
        setting = section if option is None else f"{section}.{option}"
        if section not in SECTIONS:
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=setting,
                expected=", ".join(SECTIONS)
            )
        target = getattr(self._config, section)
        if option is not None and not hasattr(target, option):
            raise ConfigurationError(
                f"Unknown configuration option: {setting}",
                setting=setting,
                issue="Option not found"
            )
        return target

    def section(self, section: str) -> Any:
        """Return the live dataclass for ``section``."""
        return self._section(section)

    def get(self, section: str, option: str, default: Any = None) -> Any:
        target = getattr(self._config, section, None)
        if section not in SECTIONS or not hasattr(target, option):
            return default
        return getattr(target, option)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value at runtime.

        Unlike the file and environment layers, a bad value raises instead
        of falling back to the default.

        Raises:
            ConfigurationError: If the section or option is unknown, or the
                value cannot be converted or is out of range
        """
        target = self._section(section, option)
        setting = f"{section}.{option}"

        try:
            converted = _coerce(getattr(target, option), value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Cannot convert value for {setting}",
                setting=setting, value=value, issue=str(e)
            ) from e

        problem = _check_value(section, option, converted)
        if problem:
            raise ConfigurationError(
                f"Invalid value for {setting}",
                setting=setting, value=value, issue=problem
            )

        setattr(target, option, converted)
        self._modified_keys.add(setting)
        if section == "logging":
            self._setup_logging()
        logger.debug(f"Set {setting}={converted!r}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """Restore defaults for everything, one section, or one option."""
        if section is None:
            self._config = VolSpecConfig()
            self._modified_keys.clear()
            self._locate_user_config()
            self._setup_logging()
            logger.debug("Reset all configuration to defaults")
            return

        self._section(section, option)
        default_section = getattr(VolSpecConfig(), section)

        if option is None:
            setattr(self._config, section, default_section)
            self._modified_keys = {k for k in self._modified_keys if not k.startswith(f"{section}.")}
        else:
            setattr(getattr(self._config, section), option, getattr(default_section, option))
            self._modified_keys.discard(f"{section}.{option}")

        if section == "logging":
            self._setup_logging()
        logger.debug(f"Reset {section if option is None else f'{section}.{option}'}")

    def is_modified(self, section: str, option: str) -> bool:
        return f"{section}.{option}" in self._modified_keys

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Nested ``{section: {option: value}}`` with paths rendered as strings."""
        result = {}
        for section in SECTIONS:
            current = getattr(self._config, section)
            values = {}
            for f in fields(current):
                value = getattr(current, f.name)
                values[f.name] = str(value) if isinstance(value, Path) else value
            result[section] = values
        return result

    def save_user_config(self) -> None:
        """Write the current configuration to the user configuration file."""
        if self._config_file is None:
            self._locate_user_config()
        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            self._config_file.write_text(json.dumps(self.to_dict(), indent=2))
        except OSError as e:
            logger.warning(f"Failed to save user configuration: {e}")
            return
        logger.debug(f"Saved user configuration to {self._config_file}")


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Return the shared, initialized configuration manager."""
    _config_manager.initialize()
    return _config_manager


def initialize_config() -> None:
    """Load the user configuration file and apply environment overrides."""
    _config_manager.initialize()


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Returned when the section or option does not exist

    Returns:
        The configuration value, or ``default``
    """
    return get_config_manager().get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Raises:
        ConfigurationError: If the section or option is not found or the
            value is invalid
    """
    get_config_manager().set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    get_config_manager().reset(section, option)


def save_config() -> None:
    """Save the current configuration to the user configuration file."""
    get_config_manager().save_user_config()


def get_numerical_config() -> NumericalConfig:
    return get_config_manager().section("numerical")


def get_starting_values_config() -> StartingValuesConfig:
    return get_config_manager().section("starting_values")
