"""Resources bundled with jarstrap (pom.xml template, plugin snippets)."""
