"""
Plugin registration

Registers the Generative Patterns pipeline as a video source with a host
that exposes a simple ``registry.register(...)`` API.
"""

from .pipeline import PatternPipeline


def register_pipelines(registry):
    """Called when the host loads the plugin."""
    registry.register(
        name="generative_patterns",
        pipeline_class=PatternPipeline,
        description="Procedural pattern engine as video source",
    )
