"""Output sinks for built sites."""

from inkwell.infra.sinks.atom import AtomFeedSink
from inkwell.infra.sinks.publish import default_sinks, publish_site
from inkwell.infra.sinks.site_json import SiteJSONSink

__all__ = ["AtomFeedSink", "SiteJSONSink", "default_sinks", "publish_site"]
