"""Minimal robots.txt parser."""

from dataclasses import dataclass, field


@dataclass
class RobotsGroup:
    agents: list[str] = field(default_factory=list)
    allow: list[str] = field(default_factory=list)
    disallow: list[str] = field(default_factory=list)

    def names(self, agent: str) -> bool:
        return agent.lower() in self.agents

    @property
    def blocks_root(self) -> bool:
        return "/" in self.disallow

    @property
    def allows_root(self) -> bool:
        # an empty Disallow also grants full access
        return "/" in self.allow or "" in self.disallow


@dataclass
class RobotsTxt:
    groups: list[RobotsGroup] = field(default_factory=list)
    sitemaps: list[str] = field(default_factory=list)
    has_allow: bool = False

    def groups_for(self, agent: str) -> list[RobotsGroup]:
        return [g for g in self.groups if g.names(agent)]

    def blocks(self, agent: str) -> bool:
        """True when a group naming this agent disallows the whole site."""
        return any(g.blocks_root for g in self.groups_for(agent))

    def explicitly_allows(self, agent: str) -> bool:
        groups = self.groups_for(agent)
        return bool(groups) and not any(g.blocks_root for g in groups) and any(g.allows_root for g in groups)

    @property
    def blocks_everyone(self) -> bool:
        """True when any group disallows ``/`` and the file has no Allow line."""
        return any(g.blocks_root for g in self.groups) and not self.has_allow


def parse_robots(text: str) -> RobotsTxt:
    """Parse directives case-insensitively; comments and unknown lines are ignored."""
    robots = RobotsTxt()
    current = None
    in_rules = False
    for raw_line in text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip().lower()
        value = value.strip()

        if key == "user-agent":
            if current is None or in_rules:
                current = RobotsGroup()
                robots.groups.append(current)
                in_rules = False
            current.agents.append(value.lower())
        elif key in ("allow", "disallow"):
            if key == "allow":
                robots.has_allow = True
            if current is None:
                continue
            in_rules = True
            (current.allow if key == "allow" else current.disallow).append(value)
        elif key == "sitemap":
            robots.sitemaps.append(value)
    return robots
