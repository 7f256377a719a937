"""posture: question-visibility and gating engine for security self-assessments."""

__version__ = "0.1.0"
