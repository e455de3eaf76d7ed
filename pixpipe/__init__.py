"""Design document.

Abstractions related to image content:

PixelGrid - An in-memory image of width x height RGB pixels, held in a
            numpy uint8 array of shape (height, width, 3).  Each grid
            owns its storage; copies and snapshots never alias the
            original array.

            Grids carry a history: a list of [kind, value] pairs that
            records the file the grid was read from and each filter
            that has been applied to it.

Pixel -     A (r, g, b) value. Grids hold pixels by value.

PpmHeader - The header of a binary ("P6") PPM file: magic, width,
            height and max value. Only max value 255 is supported.

Abstractions related to image processing:

Filter -    A named, stateless operation with bound parameters that
            mutates a row range [start_row, end_row) of a grid in
            place. Filters are either POINT filters (pixel (r,c) depends
            only on input pixel (r,c)) or NEIGHBORHOOD filters, which
            read adjacent pixels from a read-only snapshot of the grid
            taken before any writes.

RowPartitionedExecutor - Splits a grid's rows into contiguous,
            non-overlapping ranges and runs a filter over each range in
            its own thread, joining all of them before returning.

Pipeline -  An ordered list of filters. Each filter runs over the whole
            grid before the next one starts. SingleThreadedPipeline runs
            in the caller's thread; MultiThreadedPipeline runs each
            stage through the RowPartitionedExecutor.

Data flow:

   ppm.load(path) -> PixelGrid -> Pipeline.apply(grid) -> ppm.save(grid, path)

"""

__version__ = "0.1.0"
