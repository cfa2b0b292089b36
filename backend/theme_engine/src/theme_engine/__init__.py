# Theme Engine: turns brand inputs into design tokens and compiles them
# into scoped, per-tenant stylesheet fragments.
