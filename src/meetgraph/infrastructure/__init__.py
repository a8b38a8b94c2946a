"""Infrastructure layer — graph store adapter and renderer process."""
