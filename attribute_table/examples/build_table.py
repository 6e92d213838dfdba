# ==================================================
# examples/build_table.py
# ==================================================
import argparse
from attribute_table import HashTable, InsertStatus, Utf8Codec

def main(argv=None):
    p = argparse.ArgumentParser(description="insert keys into a table file and report where they landed")
    p.add_argument("table", help="path to table file")
    p.add_argument("capacity", type=int)
    p.add_argument("keys", nargs="*", help="keys to insert")
    p.add_argument("--delete", action="append", default=[], metavar="KEY")
    args = p.parse_args(argv)
    if args.capacity <= 0:
        p.error("capacity must be positive")

    table = HashTable(args.capacity, args.table, codec=Utf8Codec())
    for k in args.keys:
        res = table.insert(k)
        if res.status is InsertStatus.STORED:
            print(f"{k!r} → slot {res.position}")
        else:
            print(f"{k!r} → {res.status.value}")
    for k in args.delete:
        table.delete(k)
        print(f"deleted {k!r}")
    for i, slot in enumerate(table.slots):
        if slot is not None:
            print(f"[{i:>4}] {slot!r}")

if __name__ == "__main__":
    main()
