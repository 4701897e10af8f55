import json
import time
from typing import Any, Dict
from mediroute.kernel.dispatch_kernel import DispatchKernel
from mediroute.domain.models import EmergencyStatus
from mediroute.domain.geo import destination_point
from mediroute.store.memory import InMemoryStore

START_POINT = (30.7550, 76.7500)  # North of the seeded corridor
HEADING = 180.0  # South-bound

def run_headless_experiment(output_path: str, steps: int = 80, step_meters: float = 100.0) -> Dict[str, Any]:
    """Drives one active ambulance south through the seeded signals"""
    kernel = DispatchKernel(InMemoryStore())
    kernel.initialize()

    ambulance_id = "AMB-SIM"
    lat, lng = START_POINT
    kernel.update_location(ambulance_id, lat, lng, HEADING, 60.0)
    kernel.set_emergency_status(ambulance_id, EmergencyStatus.ACTIVE)
    kernel.run_tick()

    results = []
    start_time = time.time()
    for i in range(steps):
        lat, lng = destination_point(lat, lng, HEADING, step_meters)
        kernel.update_location(ambulance_id, lat, lng, HEADING, 60.0)
        kernel.run_tick()

        results.append({
            "step": i,
            "lat": round(lat, 6),
            "lng": round(lng, 6),
            "signals": {s.id: s.currentStatus.value for s in kernel.store.list_signals()}
        })

    end_time = time.time()
    print(f"Experiment finished in {end_time - start_time:.4f}s")

    activations = [
        {
            "signalId": a.signalId,
            "activationType": a.activationType.value,
            "distanceMeters": round(a.distanceMeters, 1)
        }
        for a in reversed(kernel.store.list_activations())
    ]
    output = {"steps": results, "activations": activations}

    with open(output_path, 'w') as f:
        json.dump(output, f, indent=2)
    return output

if __name__ == "__main__":
    import sys
    if len(sys.argv) > 1:
        run_headless_experiment(sys.argv[1])
    else:
        print("Usage: python -m mediroute.experiments.run_experiment <output>")
