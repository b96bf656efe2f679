"""
sim — Simulation core
=====================

Modules
-------
world
    :class:`World` composition root and physics loop.
car_system
    :class:`CarSystem` placement, selection and per-tick car update.
car
    :class:`Car` record, :class:`CarType`, :class:`CarState`, add-mode.
signals
    :class:`TrafficControls` streetlights gating cross-sections.
commands
    :class:`Click`, :class:`StartAdding`, :class:`Cancel` input commands.
traffic_policy
    :class:`DrivingPolicy` tunable constants.
sim_bridge
    :class:`SimBridge` background-thread orchestrator.
physics
    Low-level conversion and angle helpers.
"""
