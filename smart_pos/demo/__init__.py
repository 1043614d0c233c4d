from smart_pos.demo.default_scenario import SCENARIO_ID, run_default_scenario

__all__ = ["SCENARIO_ID", "run_default_scenario"]
