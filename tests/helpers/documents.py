"""Builders for setup documents used across the test-suite."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from orsf.core.document import (
    Aerodynamics,
    Brakes,
    Car,
    Context,
    CornerSuspension,
    Drivetrain,
    Electronics,
    Fuel,
    Gearing,
    Metadata,
    Setup,
    SetupDocument,
    Strategy,
    Suspension,
    Tires,
)


def build_document(**metadata_overrides: Any) -> SetupDocument:
    """Return a document that passes validation without findings."""

    metadata = {
        "id": "setup-001",
        "name": "Baseline",
        "created_at": "2024-05-01T12:00:00Z",
    }
    metadata.update(metadata_overrides)
    return SetupDocument(
        metadata=Metadata(**metadata),
        car=Car(make="Porsche", model="911 GT3 R"),
    )


def build_context(
    ambient_temp_c: Optional[float] = 22.0,
    track_temp_c: Optional[float] = 30.0,
    **overrides: Any,
) -> Context:
    payload = {
        "track": "Spa-Francorchamps",
        "layout": "GP",
        "ambient_temp_c": ambient_temp_c,
        "track_temp_c": track_temp_c,
        "rubber": "medium",
    }
    payload.update(overrides)
    return Context(**payload)


def build_gearing(ratios: Sequence[float] = (3.5, 2.8, 2.3, 1.9, 1.6), reverse: float = 3.2) -> Gearing:
    return Gearing(gear_ratios=list(ratios), reverse_ratio=reverse)


def _corner(camber: float) -> CornerSuspension:
    return CornerSuspension(
        camber_deg=camber,
        toe_deg=0.1,
        spring_rate_n_mm=120.0,
        ride_height_mm=55.0,
        damper_bump_slow_n_s_m=3500.0,
        damper_rebound_slow_n_s_m=5200.0,
    )


def build_full_document() -> SetupDocument:
    """Return a valid document populating every section."""

    doc = build_document(
        notes="Qualifying trim",
        tags=["quali", "dry"],
        origin_sim="example",
    )
    doc.car.car_class = "GT3"
    doc.context = build_context()
    doc.setup = Setup(
        aero=Aerodynamics(front_wing=3.0, rear_wing=7.5, front_ride_height_mm=52.0),
        suspension=Suspension(
            front_left=_corner(-3.5),
            front_right=_corner(-3.5),
            rear_left=_corner(-2.8),
            rear_right=_corner(-2.8),
            front_arb=4.0,
            rear_arb=2.0,
        ),
        tires=Tires(
            compound="medium",
            pressure_fl_kpa=172.0,
            pressure_fr_kpa=172.0,
            pressure_rl_kpa=168.0,
            pressure_rr_kpa=168.0,
        ),
        drivetrain=Drivetrain(diff_preload_nm=80.0, final_drive_ratio=3.9, lsd_clutch_plates=6),
        gearing=build_gearing(),
        brakes=Brakes(pad_compound="endurance", brake_bias_pct=56.5),
        electronics=Electronics(tc_level=3, abs_level=4, engine_map=1, pit_limiter_kph=60.0),
        fuel=Fuel(start_fuel_l=90.0, per_lap_consumption_l=3.1, stint_target_laps=28),
        strategy=Strategy(tire_change_policy="every stint", custom={"pit_window": [25, 30]}),
    )
    doc.compat = {"example": {"build": 1234}}
    return doc
