"""Box-model layout, recorded drawing, editing and mouse selection for a frame of text."""