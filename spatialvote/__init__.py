"""Spatialvote - spatial voting simulations in a 2D preference plane.

Candidates and voters are points in a plane; voters prefer nearer
candidates. Spatialvote determines who wins such elections under several
voting methods and how the winner changes as the electorate moves around.

The package is organized as follows:

-   The ``geometry`` module holds the distance and preference primitives.
-   The ``generate`` module samples voters from Gaussian distributions
    (clouds) whose center can be moved without resampling.
-   The ``candidate`` module defines the candidates and their default
    arrangement and colours.
-   The ``evaluate`` subpackage contains the evaluators of the voting
    methods (plurality, approval, two-round, score, instant-runoff, STAR and
    Borda), producing election results with per-voter display annotations.
-   The :mod:`system` module registers the methods under their tags and
    provides :func:`system.run_election`, the single entry point to run an
    election.
-   The ``crit.yee`` module generates winner territory maps (Yee diagrams)
    over the whole plane and caches them.
"""
