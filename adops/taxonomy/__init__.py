"""Taxonomy resolution engine.

Expands level templates (literal text, ``[name:format]`` variables and
``<...>`` groups) against a campaign → tactic → placement → creative
chain, resolving shortcode references through per-pass lookup caches.
"""
