"""ONI-MED: inventario de medicamentos con caducidades, pauta y copias JSON."""

__version__ = "1.0.0"
