import logging
import math

import numpy as np

import ressum

logging.basicConfig(level=logging.INFO)
np.set_printoptions(precision=3, suppress=True)

SECONDS_PER_DAY = ressum.c.SECONDS_PER_DAY


def main():
    model = ressum.EntityModel(
        keywords=[
            "WOPR", "WWPR", "WGPR", "WOPT", "WWIT", "WWCT", "WGOR", "WBHP",
            "GOPR", "GOPT", "GWCT", "FOPR", "FOPT", "FWIT",
        ],
        groups={"PRODUCERS": ["P1", "P2"], "INJECTORS": ["I1"]},
    )  # fmt: skip
    engine = ressum.SummaryEngine(
        model, store=ressum.new_store("hdf5", "output/summary.h5")
    )

    # Declining producers, constant water injection, reported every 30 days
    for step in range(13):
        days = 30.0 * step
        decline = math.exp(-days / 400.0)
        wells = {
            "P1": ressum.WellSnapshot(
                ressum.RateVector(
                    water=-(50.0 * (1 - decline)) / SECONDS_PER_DAY,
                    oil=-(400.0 * decline) / SECONDS_PER_DAY,
                    gas=-(32_000.0 * decline) / SECONDS_PER_DAY,
                ),
                bhp=150e5 + 20e5 * decline,
            ),
            "P2": ressum.WellSnapshot(
                ressum.RateVector(
                    water=-(80.0 * (1 - decline)) / SECONDS_PER_DAY,
                    oil=-(250.0 * decline) / SECONDS_PER_DAY,
                    gas=-(20_000.0 * decline) / SECONDS_PER_DAY,
                ),
                bhp=140e5 + 15e5 * decline,
            ),
            "I1": ressum.WellSnapshot(
                ressum.RateVector(water=600.0 / SECONDS_PER_DAY), bhp=260e5
            ),
        }
        engine.ingest(step, days * SECONDS_PER_DAY, wells)

    table = engine.flush()
    print("Report days:", np.asarray(table.sim_days))
    print("FOPT:", table.series("FOPT"))
    print("GWCT PRODUCERS:", table.series("GWCT", "PRODUCERS"))
    print("WGOR P1:", table.series("WGOR", "P1"))
    print("FWIT after one year:", table.get_field_var(12, "FWIT"))

    reloaded = ressum.SummaryTable.from_file("output/summary.h5")
    assert reloaded == table


if __name__ == "__main__":
    main()
