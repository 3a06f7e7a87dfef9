"""End-to-end run: table + FASTA directory -> trained model -> test predictions."""

import random

import pytest

from lknet import (
    EmptyDatasetError,
    IntervalResolver,
    ModelAdapter,
    ModelConfig,
    ReferenceStore,
    TrainConfig,
    build_dataset,
    read_interval_table,
    train_test_split,
)


@pytest.fixture
def lk_inputs(tmp_path):
    rng = random.Random(1)
    genome = tmp_path / "genome"
    genome.mkdir()
    chroms = {name: "".join(rng.choice("ACGT") for _ in range(500)) for name in ("chrI", "chrII")}
    for name, seq in chroms.items():
        lines = [seq[i : i + 60] for i in range(0, len(seq), 60)]
        (genome / f"{name}.fasta").write_text(f">{name}\n" + "\n".join(lines) + "\n")

    rows = ["CHRM;START;END;DELTALK"]
    for _ in range(30):
        chrom = rng.choice(list(chroms))
        start = rng.randint(1, 450)
        end = start + rng.randint(10, 40)
        rows.append(f"{chrom};{start};{end};{rng.uniform(-2, 2):.3f}".replace(".", ","))
    rows.append("chrIII;1;20;0,1")
    rows.append("chrI;490;520;0,2")
    table = tmp_path / "LK_data.csv"
    table.write_text("\n".join(rows) + "\n")
    return table, genome


def test_full_pipeline(lk_inputs):
    table, genome = lk_inputs

    store = ReferenceStore.load(genome)
    records = read_interval_table(table)
    resolver = IntervalResolver(store)
    dataset = build_dataset(resolver.resolve_records(records))

    assert len(records) == 32
    assert resolver.n_unknown_chrom == 1
    assert resolver.n_out_of_bounds >= 1
    assert len(dataset) == 32 - resolver.n_unknown_chrom - resolver.n_out_of_bounds

    train, test = train_test_split(dataset, seed=42)
    assert len(train) == int(0.8 * len(dataset))
    assert train.max_length == test.max_length == dataset.max_length

    model_config = ModelConfig(conv_channels=(8,), kernel_sizes=(5,), pool_sizes=(2,), dense_units=(4,))
    adapter = ModelAdapter(model_config, seed=42, verbose=False)
    history = adapter.fit(train.X, train.y, TrainConfig(epochs=2, batch_size=8))
    assert len(history.epoch) == 2

    preds = adapter.predict(test.X)
    assert preds.shape == (len(test),)


def test_nothing_resolves(lk_inputs, tmp_path):
    table, _ = lk_inputs
    other = tmp_path / "other"
    other.mkdir()
    (other / "chrZ.fasta").write_text(">chrZ\nACGT\n")

    resolved = IntervalResolver(ReferenceStore.load(other)).resolve_records(read_interval_table(table))
    with pytest.raises(EmptyDatasetError):
        build_dataset(resolved)
