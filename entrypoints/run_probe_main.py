import runpy
import traceback


def main():
    try:
        # Equivalent to: python -m notify_probe.dev.run_probe
        runpy.run_module("notify_probe.dev.run_probe", run_name="__main__")
    except SystemExit:
        raise
    except Exception:
        traceback.print_exc()
        input("\nPress Enter to exit...")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
