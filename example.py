"""Example usage of the csvdb library."""

from pathlib import Path

from csvdb import Condition, Date, Db

# Create a data directory for storage
data_dir = Path("./example_data")

db = Db.create("examples", data_dir)
db.create_table("journal")
for column in ["date", "text", "tags"]:
    db.create_column("journal", column)

# Raw strings are typed on insert: "12.02.2022" becomes a date
db.insert("journal", ["12.02.2022", "regular line", ""])

# A join stores several values out of line in the .ids table
tags = db.store_ids(["work", "travel", "notes"])
db.insert_data("journal", [Date(2022, 2, 13), db.store_ids(["first line", "second line"]), tags])

print(db.display("journal"))

db.save()

# Load it back and query it
db = Db.load("examples", data_dir)
for row in db.select_where("journal", [Condition.equal("date", Date(2022, 2, 13))]):
    for value in row:
        print(db.expand(value))

# Update the first row, or insert it if it is missing
db.insert_update_where(
    "journal",
    ["12.02.2022", "updated line", ""],
    [Condition.equal("date", Date(2022, 2, 12))],
)
db.save()

print(f"Data stored in: {db.path}")
