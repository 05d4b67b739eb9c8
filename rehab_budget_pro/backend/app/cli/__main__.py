# backend/app/cli/__main__.py
from __future__ import annotations

import argparse

from app.cli.seed_demo import seed_demo


def main() -> None:
    p = argparse.ArgumentParser(prog="python -m app.cli", description="Seed a demo org, system budget templates and a sample project.")
    p.add_argument("--org-slug", default="demo")
    p.add_argument("--org-name", default="Demo Org")
    p.add_argument("--user-email", default="demo@rehabpro.local")
    p.add_argument("--user-name", default="Demo")
    p.add_argument("--no-sample-project", action="store_true")
    args = p.parse_args()

    out = seed_demo(
        org_slug=args.org_slug,
        org_name=args.org_name,
        user_email=args.user_email,
        user_name=args.user_name,
        create_sample_project=(not args.no_sample_project),
    )
    print(
        {
            "ok": True,
            "org_slug": out.org_slug,
            "user_email": out.user_email,
            "cost_reference_rows": out.cost_reference_rows,
            "sample_project_id": out.project_id,
            "system_templates": out.system_templates,
        }
    )


if __name__ == "__main__":
    main()
