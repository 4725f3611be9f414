from tactics.errors import InvalidInput


def build_empty_grid(rows, cols):
    """A rows x cols grid with no tile in any cell."""
    return [[None for _ in range(cols)] for _ in range(rows)]


def assert_grid_size(grid, rows, cols):
    """Reject a tile grid whose shape disagrees with its declared tile counts.

    rows is tile_count_y (number of inner lists), cols is tile_count_x
    (length of every inner list).
    """
    if len(grid) != rows:
        raise InvalidInput('Tile grid row count does not match tile_count_y', details=[
            {'field': 'tile_grid', 'message': f'expected {rows} rows, got {len(grid)}',
             'type': 'grid_rows'},
        ])
    for index, row in enumerate(grid):
        if len(row) != cols:
            raise InvalidInput('Tile grid column count does not match tile_count_x', details=[
                {'field': f'tile_grid.{index}',
                 'message': f'expected {cols} cells, got {len(row)}',
                 'type': 'grid_columns'},
            ])


def assert_tile_ceiling(count, ceiling):
    if count > ceiling:
        raise InvalidInput(f'Too many tiles (max {ceiling})', details=[
            {'field': 'tiles', 'message': f'{count} tiles requested, at most {ceiling} allowed',
             'type': 'too_many_tiles'},
        ])
