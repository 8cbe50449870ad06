"""Technical-interview rehearsal with generated questions."""
