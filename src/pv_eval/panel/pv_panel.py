"""
PV Panel Module

This module holds the state of a monitored photovoltaic panel: its nameplate
specifications, the log of field measurements taken on it and the log of
degradation profiles generated for it.

A panel exclusively owns its specification mapping and both logs. Test
records and profiles are immutable values; accessors hand out copies so
callers never share the panel's internal containers.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Tuple, Union


class SpecificationKey(str, Enum):
    """Nameplate attributes a panel can carry"""
    RATED_EFFICIENCY = "Rated Efficiency (%)"
    MODULE_AREA = "Panel Area (m²)"
    PMAX = "Rated Pmax (W)"
    TEMP_COEFF_PMAX = "Pmax Temp. Coefficient (%/°C)"
    OPEN_CIRCUIT_VOLTAGE = "Voc"
    SHORT_CIRCUIT_CURRENT = "Isc"

    @classmethod
    def coerce(cls, key: Union["SpecificationKey", str]) -> "SpecificationKey":
        """
        Resolve a key given as a member, a member name or a display label

        Args:
            key: SpecificationKey, enum name ("MODULE_AREA", "module_area")
                 or label ("Panel Area (m²)")

        Returns:
            Matching SpecificationKey
        """
        if isinstance(key, cls):
            return key
        if isinstance(key, str):
            name = key.strip().upper()
            if name in cls.__members__:
                return cls.__members__[name]
            for member in cls:
                if member.value == key:
                    return member
        raise ValueError(f"Unknown specification key: {key!r}")


@dataclass(frozen=True)
class PVPanelTest:
    """A single field measurement of a panel"""
    timestamp: datetime
    power_output: float             # Measured power (W), V × I


@dataclass(frozen=True)
class PVPanelProfile:
    """A report estimating the degradation of a panel at a point in time"""
    panel_id: str
    degradation: Optional[float]    # Fraction, None if it could not be computed
    generated_on: datetime

    @property
    def degradation_percent(self) -> Optional[float]:
        if self.degradation is None:
            return None
        return self.degradation * 100.0

    @property
    def performance_percent(self) -> Optional[float]:
        """Share of the original rated performance still delivered"""
        if self.degradation is None:
            return None
        return (1.0 - self.degradation) * 100.0


ProfileCompletion = Callable[[Optional[PVPanelProfile], Optional[Exception]], None]


class PVPanel:
    """
    A monitored PV panel.

    Features:
    - Last-write-wins specification store keyed by SpecificationKey
    - Append-only test record log
    - Append-only profile history
    - Lock-guarded mutation and snapshot reads
    """

    def __init__(self, panel_id: str, model_number: Optional[str] = None):
        """
        Initialize panel

        Args:
            panel_id: Opaque unique identifier, fixed for the panel's lifetime
            model_number: Optional human-readable model number
        """
        self._panel_id = panel_id
        self.model_number = model_number

        self._specifications: Dict[SpecificationKey, float] = {}
        self._tests = []
        self._profiles = []
        self._lock = threading.RLock()

    @property
    def panel_id(self) -> str:
        return self._panel_id

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def specifications(self) -> Dict[SpecificationKey, float]:
        with self._lock:
            return dict(self._specifications)

    @property
    def recorded_tests(self) -> Tuple[PVPanelTest, ...]:
        with self._lock:
            return tuple(self._tests)

    @property
    def recorded_profiles(self) -> Tuple[PVPanelProfile, ...]:
        with self._lock:
            return tuple(self._profiles)

    def record_specifications(self, values: Mapping[Union[SpecificationKey, str], float]):
        """
        Merge specifications into the panel

        Values for keys already present are overwritten. No range checks are
        made; a negative area is stored as given.

        Args:
            values: Mapping of specification key to value
        """
        # Resolve every key before touching state so a bad key changes nothing
        resolved = {SpecificationKey.coerce(key): float(value) for key, value in values.items()}
        with self._lock:
            self._specifications.update(resolved)

    def record_test(self, test: PVPanelTest):
        """Append a test record to the log"""
        with self._lock:
            self._tests.append(test)

    def record_profile(self, profile: PVPanelProfile):
        """Append a generated profile to the history"""
        if profile.panel_id != self._panel_id:
            raise ValueError(f"Profile belongs to panel {profile.panel_id}, not {self._panel_id}")
        with self._lock:
            self._profiles.append(profile)

    def snapshot(self) -> Tuple[Dict[SpecificationKey, float], Tuple[PVPanelTest, ...]]:
        """Specifications and test log read under a single lock acquisition"""
        with self._lock:
            return dict(self._specifications), tuple(self._tests)

    def generate_profile(self, completion: Optional[ProfileCompletion] = None,
                         generator=None) -> Optional[PVPanelProfile]:
        """
        Generate a degradation profile for this panel

        Without a completion callable the profile is returned and an
        InsufficientDataError propagates. With one, the outcome is reported
        as completion(profile, error) with exactly one side populated.

        Args:
            completion: Optional callback receiving (profile, error)
            generator: ProfileGenerator to use, a default one if omitted

        Returns:
            The generated profile, or None when reported through a failing completion
        """
        if generator is None:
            from ..degradation.profile_generator import ProfileGenerator
            generator = ProfileGenerator()

        if completion is None:
            return generator.generate_profile(self)

        from ..degradation.estimator import InsufficientDataError
        try:
            profile = generator.generate_profile(self)
        except InsufficientDataError as e:
            completion(None, e)
            return None

        completion(profile, None)
        return profile

    def __repr__(self) -> str:
        return (f"PVPanel(panel_id={self._panel_id!r}, model_number={self.model_number!r}, "
                f"tests={len(self._tests)}, profiles={len(self._profiles)})")
