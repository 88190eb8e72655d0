def get_diff_positions(patch_text: str) -> dict[int, int]:
    """
    Maps new-file line numbers to their cumulative GitHub diff positions.

    Review comments are anchored by position, counted across the entire patch
    rather than reset per hunk. The @@ header line of the first hunk is not
    counted; position 1 is the first content line below it.
    """
    positions: dict[int, int] = {}
    diff_position = 0
    file_line: int | None = None
    first_hunk = True

    for line in patch_text.splitlines():
        if line.startswith("@@"):
            try:
                new_file_range = line.split("+")[1].split(" ")[0]
                file_line = int(new_file_range.split(",")[0])
            except (IndexError, ValueError):
                file_line = None
            # Later hunk headers take up a position of their own.
            if not first_hunk:
                diff_position += 1
            first_hunk = False
            continue

        diff_position += 1

        if line.startswith("+") and not line.startswith("+++"):
            if file_line is not None:
                positions[file_line] = diff_position
                file_line += 1
        elif line.startswith("-") and not line.startswith("---"):
            pass  # Removed line; does not advance the new-file line counter
        elif line.startswith("\\"):
            pass  # "\ No newline at end of file"
        else:
            if file_line is not None:
                positions[file_line] = diff_position
                file_line += 1

    return positions
