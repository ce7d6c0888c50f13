# Set-AzureEnv.py
import os, json, argparse, subprocess, sys

REQUIRED = ("AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_DEPLOYMENT")
SHOWN = ("AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_DEPLOYMENT", "AZURE_OPENAI_API_VERSION", "LLM_BACKEND", "USE_LLM_INSIGHTS")


def load_cfg(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    # accept both env-style keys and the short keys read by the insight bridge
    short = {"endpoint": "AZURE_OPENAI_ENDPOINT", "api_key": "AZURE_OPENAI_API_KEY",
             "deployment": "AZURE_OPENAI_DEPLOYMENT", "api_version": "AZURE_OPENAI_API_VERSION"}
    cfg = {short.get(k, k): str(v) for k, v in raw.items()}
    missing = [k for k in REQUIRED if not cfg.get(k)]
    if missing:
        print(f"Missing {', '.join(missing)} in {path}", file=sys.stderr); sys.exit(1)
    cfg.setdefault("AZURE_OPENAI_API_VERSION", "2024-08-01-preview")
    cfg.setdefault("LLM_BACKEND", "azure")
    cfg.setdefault("USE_LLM_INSIGHTS", "1")
    return cfg


def main():
    ap = argparse.ArgumentParser(description="Run a command with Azure OpenAI insight settings in its environment.")
    ap.add_argument("--config", default=".azure_config.json")
    ap.add_argument("--run", nargs=argparse.REMAINDER,
                    help="Command to run with env set, e.g. --run python autoplay.py --profile mixed --llm azure")
    args = ap.parse_args()

    cfg = load_cfg(args.config)
    env = os.environ.copy(); env.update(cfg)

    if not args.run:
        print("Loaded Azure config:")
        for k in SHOWN:
            print(f"{k}={env.get(k)}")
        return

    print("Launching:", " ".join(args.run))
    subprocess.run(args.run, env=env, check=True)


if __name__ == "__main__":
    main()
