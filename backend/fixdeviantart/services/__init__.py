"""
Services module for the FixDeviantArt embed proxy.

- metadata_service: oEmbed fetch and decode into a ContentRecord
- video_resolver: film player scrape for a direct MP4 source
- render_service: document variant selection and Jinja2 rendering
- embed_service: the per-request pipeline under a single deadline
"""
